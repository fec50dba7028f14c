"""
Classification of commit messages for release notes.

A commit summary is read with a small, permissive grammar::

    verb[!][(scope, scope)][!][:] subject

The verb decides the :class:`Category`, the parenthesised part lists the
subjects (scopes) of the change, and an exclamation mark attached to the
verb or to the scope group marks a breaking change. A last body line
starting with ``BREAKING CHANGE:`` marks a breaking change too.

Issue references such as ``Ref #123`` or ``(close #45)`` are collected
from both the summary and the body.

Nothing here raises on bad input: a message that does not follow the
grammar is classified as :attr:`Category.MISC` with no subjects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Pattern


BREAKING_FOOTER = "BREAKING CHANGE:"
BREAKING_LABEL = "[**BREAKING CHANGE**]"


class Category(Enum):
    """Release note section a commit belongs to.

    The declaration order is the order sections are rendered in.
    """

    FEATURE = "Feature"
    FIX = "Fix"
    REFACTOR = "Refactor"
    CHORE = "Chore"
    ENHANCEMENT = "Enhancements"
    STYLE = "Style"
    CI = "CI"
    DOCUMENTATION = "Documentation"
    MISC = "Misc"

    @property
    def heading(self) -> str:
        return self.value

    @classmethod
    def from_verb(cls, verb: Optional[str]) -> "Category":
        """Map a verb (case-insensitive) to its category."""
        if not verb:
            return cls.MISC
        return _VERBS.get(verb.lower(), cls.MISC)

    def __str__(self) -> str:
        return self.value


_VERBS: Dict[str, Category] = {
    "feat": Category.FEATURE,
    "feature": Category.FEATURE,
    "fix": Category.FIX,
    "fixed": Category.FIX,
    "fixes": Category.FIX,
    "ref": Category.REFACTOR,
    "refactor": Category.REFACTOR,
    "refactored": Category.REFACTOR,
    "chore": Category.CHORE,
    "enhance": Category.ENHANCEMENT,
    "enhanced": Category.ENHANCEMENT,
    "enhancement": Category.ENHANCEMENT,
    "enhancements": Category.ENHANCEMENT,
    "improve": Category.ENHANCEMENT,
    "improved": Category.ENHANCEMENT,
    "improves": Category.ENHANCEMENT,
    "improvement": Category.ENHANCEMENT,
    "improvements": Category.ENHANCEMENT,
    "style": Category.STYLE,
    "ci": Category.CI,
    "doc": Category.DOCUMENTATION,
    "docs": Category.DOCUMENTATION,
}


@dataclass(frozen=True)
class Commit:
    """A single commit read from the repository.

    Attributes
    ----------
    sha : str
        Full hex identifier of the commit.
    summary : str
        First paragraph of the message, on one line.
    body : str
        The rest of the message, without the summary.
    """

    sha: str
    summary: str
    body: str = ""


@dataclass(frozen=True)
class Reference:
    """A link to an issue or pull request, e.g. ``#123``."""

    number: int

    def __str__(self) -> str:
        return f"ref #{self.number}"


@dataclass(frozen=True)
class ClassifiedCommit:
    """A commit together with everything derived from its message."""

    commit: Commit
    category: Category
    title: str
    subjects: Optional[List[str]] = field(default=None, hash=False)
    breaking: bool = False
    references: List[Reference] = field(default_factory=list, hash=False)
    display: str = ""


@dataclass(frozen=True)
class SummaryParts:
    """Pieces of a summary line matched by the grammar."""

    verb: str
    subjects: Optional[List[str]]
    breaking: bool
    text: str


class CommitGrammar:
    """Compiled patterns used to read commit messages.

    Build one instance and share it between classifiers.
    """

    SUMMARY_PATTERN = (
        r"^\s*(?P<verb>\w+)(?P<verb_bang>!)?"
        r"(?:\s*\((?P<scopes>[^()]*)\)(?P<scope_bang>!)?)?"
        r"\s*:?(?P<text>.*)$"
    )
    REFERENCE_PATTERN = r"\(?\w+\s+#(?P<number>\d+)\)?"

    def __init__(
        self,
        summary_pattern: Optional[str] = None,
        reference_pattern: Optional[str] = None,
    ) -> None:
        self.summary_re: Pattern[str] = re.compile(
            summary_pattern or self.SUMMARY_PATTERN, re.DOTALL
        )
        self.reference_re: Pattern[str] = re.compile(
            reference_pattern or self.REFERENCE_PATTERN
        )

    def parse_summary(self, summary: str) -> Optional[SummaryParts]:
        """Split a summary into its grammar parts, or None if it does not match."""
        match = self.summary_re.match(summary)
        if not match:
            return None
        return SummaryParts(
            verb=match.group("verb"),
            subjects=_split_scopes(match.group("scopes")),
            breaking=bool(match.group("verb_bang") or match.group("scope_bang")),
            text=match.group("text"),
        )

    def find_references(self, text: str) -> List[Reference]:
        return [Reference(int(m.group("number"))) for m in self.reference_re.finditer(text)]

    def strip_references(self, text: str) -> str:
        return self.reference_re.sub("", text)


def _split_scopes(scopes: Optional[str]) -> Optional[List[str]]:
    if scopes is None:
        return None
    names = [name.strip() for name in scopes.split(",")]
    names = [name for name in names if name]
    return names or None


def capitalize_first(text: str) -> str:
    """Uppercase the first character only, leaving the rest untouched.

    ``str.upper`` may expand a character, e.g. ``"ß"`` becomes ``"SS"``.
    """
    if not text:
        return text
    return text[0].upper() + text[1:]


class CommitClassifier:
    """Derive release note information from commits.

    Parameters
    ----------
    grammar : CommitGrammar, optional
        Patterns to use. A new :class:`CommitGrammar` is built when omitted.
    """

    def __init__(self, grammar: Optional[CommitGrammar] = None) -> None:
        self.grammar = grammar or CommitGrammar()

    def title(self, commit: Commit) -> str:
        """The summary without issue references, trimmed."""
        return self.grammar.strip_references(commit.summary).strip()

    def category(self, commit: Commit) -> Category:
        parts = self.grammar.parse_summary(commit.summary)
        return Category.from_verb(parts.verb if parts else None)

    def subjects(self, commit: Commit) -> Optional[List[str]]:
        """Scopes listed in the summary, or None when there are none.

        References are removed first so ``title (ref #12)`` has no scope.
        """
        parts = self.grammar.parse_summary(self.title(commit))
        return parts.subjects if parts else None

    def is_breaking(self, commit: Commit) -> bool:
        parts = self.grammar.parse_summary(commit.summary)
        if parts and parts.breaking:
            return True
        lines = commit.body.splitlines()
        return bool(lines) and lines[-1].startswith(BREAKING_FOOTER)

    def references(self, commit: Commit) -> List[Reference]:
        """Issue references in the summary and body, in order of appearance."""
        return self.grammar.find_references(f"{commit.summary}\n{commit.body}")

    def display(self, commit: Commit) -> str:
        """Render the commit as one line of markdown.

        When the title contains a colon the text after the verb and scopes
        is shown. A title the grammar cannot read, e.g. ``: crash`` left
        over from ``fix #12: crash``, shows the text after its first colon.
        """
        title = self.title(commit)
        parts = self.grammar.parse_summary(title)

        if ":" not in title:
            text = title
        elif parts:
            text = parts.text
        else:
            text = title.partition(":")[2]
        line = capitalize_first(text.strip())

        subjects = parts.subjects if parts else None
        if subjects:
            line = f"**{', '.join(subjects)}:** {line}"
        if self.is_breaking(commit):
            line = f"{line} {BREAKING_LABEL}"
        references = self.references(commit)
        if references:
            line = f"{line} ({', '.join(str(ref) for ref in references)})"
        return line

    def classify(self, commit: Commit) -> ClassifiedCommit:
        return ClassifiedCommit(
            commit=commit,
            category=self.category(commit),
            title=self.title(commit),
            subjects=self.subjects(commit),
            breaking=self.is_breaking(commit),
            references=self.references(commit),
            display=self.display(commit),
        )
