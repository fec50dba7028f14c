"""
Version control system (VCS) integration.

This package contains the Git client used to list tags, resolve
revisions and walk the commits between two references.
"""

from .git_client import GitClient, GitError  # noqa: F401
