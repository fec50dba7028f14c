"""
Classification and grouping of commits.

This package reads commit messages into categories and renders the
grouped result as markdown. See :mod:`vc_release_notes.grouping.commit_parser`
and :mod:`vc_release_notes.grouping.release` for details.
"""

from .commit_parser import Category, Commit, CommitClassifier, CommitGrammar, Reference  # noqa: F401
from .release import Release, group_commits  # noqa: F401
