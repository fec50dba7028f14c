"""
Grouping and rendering of release notes.

A :class:`Release` holds the commits of one range and partitions them by
:class:`~vc_release_notes.grouping.commit_parser.Category`. Rendering
produces one markdown block per non-empty category, in the declaration
order of the enumeration::

    ### Feature

    - **repo:** The title (ref #123)

    ### Fix

    - Something else
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from vc_release_notes.grouping.commit_parser import (
    Category,
    ClassifiedCommit,
    Commit,
    CommitClassifier,
)


def group_commits(
    commits: Iterable[Commit], classifier: CommitClassifier
) -> Dict[Category, List[Commit]]:
    """Partition ``commits`` by category.

    Commits keep their input order inside each group. Categories without
    commits are left out. Keys follow the order of :class:`Category`.
    """
    groups: Dict[Category, List[Commit]] = {}
    for commit in commits:
        groups.setdefault(classifier.category(commit), []).append(commit)
    return {category: groups[category] for category in Category if category in groups}


def render_group(category: Category, entries: List[ClassifiedCommit]) -> str:
    lines = [f"### {category.heading}", ""]
    lines.extend(f"- {entry.display}" for entry in entries)
    return "\n".join(lines)


@dataclass
class Release:
    """The commits of one release.

    Attributes
    ----------
    commits : List[Commit]
        Commits in the order they were read from the repository.
    classifier : CommitClassifier
        Classifier used for grouping and rendering.
    """

    commits: List[Commit] = field(default_factory=list)
    classifier: Optional[CommitClassifier] = None

    def __post_init__(self) -> None:
        # Accept any iterable, e.g. the generator from GitClient.commits_between.
        self.commits = list(self.commits)
        if self.classifier is None:
            self.classifier = CommitClassifier()

    def groups(self) -> Dict[Category, List[Commit]]:
        return group_commits(self.commits, self.classifier)

    def classified(self) -> List[ClassifiedCommit]:
        return [self.classifier.classify(commit) for commit in self.commits]

    def render(self) -> str:
        """Return the release notes as markdown."""
        entries = self.classified()
        blocks = []
        for category in Category:
            group = [entry for entry in entries if entry.category is category]
            if group:
                blocks.append(render_group(category, group))
        return "\n\n".join(blocks)

    def __str__(self) -> str:
        return self.render()
