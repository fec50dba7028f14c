"""
Release hosting integration for vc_release_notes.

This package contains the :class:`GitHubClient` used to create or
overwrite the GitHub release of a tag.
"""

from .github_client import GitHubClient, PublishError, ReleaseExistsError  # noqa: F401
