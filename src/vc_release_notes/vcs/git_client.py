"""
Git client implementation for vc_release_notes.

This module wraps the Git operations needed to turn a range of history
into release notes: listing tags, resolving revisions, walking the
commits between two references and reading the remote URL. All
subprocess calls go through :meth:`GitClient._run` so that unit tests can
mock them easily.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from vc_release_notes.grouping.commit_parser import Commit


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# Remote URLs look like ``git@github.com:owner/project.git`` or
# ``https://github.com/owner/project``.
REMOTE_URL_RE = re.compile(r"[:/](?P<owner>[^/:]+)/(?P<project>[^/]+?)(?:\.git)?/?$")

# Field and record separators for ``git log --format``.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_COMMIT_FORMAT = f"%H{_FIELD_SEP}%s{_FIELD_SEP}%b{_RECORD_SEP}"


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class RepositoryUnavailableError(GitError):
    """Raised when the repository cannot be opened or queried."""

    pass


class TagNotFoundError(GitError):
    """Raised when a tag or revision does not resolve to a commit."""

    def __init__(self, tag: str, message: Optional[str] = None) -> None:
        self.tag = tag
        super().__init__(message or f"Could not find the '{tag}' tag")


class TagListError(GitError):
    """Raised when the list of tags cannot be read."""

    pass


class TwinTagsError(GitError):
    """Raised when both ends of a range point at the same commit."""

    def __init__(self, from_ref: str, to_ref: str) -> None:
        self.from_ref = from_ref
        self.to_ref = to_ref
        super().__init__(
            f"Both tags are pointing at the same commit ({from_ref}, {to_ref})"
        )


class RemoteURLError(GitError):
    """Raised when the URL of a remote cannot be read or parsed."""

    pass


class GitClient:
    """Client for querying the history of a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Repository discovery
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` directory is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                # reached filesystem root
                return None
            current = current.parent

    @classmethod
    def open(cls, path: Path) -> "GitClient":
        """Return a client for the repository containing ``path``.

        Raises
        ------
        RepositoryUnavailableError
            If ``path`` is not inside a Git repository.
        """
        root = cls.find_repo_root(path)
        if root is None:
            raise RepositoryUnavailableError(f"Not a git repository: {path}")
        return cls(root)

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(
        self, args: List[str], check: bool = True, input: Optional[str] = None
    ) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root, feeding ``input`` to stdin.

        Raises
        ------
        RepositoryUnavailableError
            If the ``git`` executable cannot be started.
        GitError
            If the command exits with a non-zero status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                input=input,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",  # Replace invalid characters instead of failing
            )
        except OSError as e:
            logger.error("Could not run git in %s: %s", self.repo_root, e)
            raise RepositoryUnavailableError(f"Could not run git: {e}") from e

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # Revisions and tags
    # ------------------------------------------------------------------
    def tags(self) -> List[str]:
        """Return the tag names in creation order, oldest first.

        Raises
        ------
        TagListError
            If the tag list cannot be read.
        """
        try:
            result = self._run(["tag", "--list", "--sort=creatordate"], check=True)
        except RepositoryUnavailableError:
            raise
        except GitError as exc:
            raise TagListError(f"Could not get the tag list: {exc}") from exc
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def latest_tag(self) -> str:
        """Return the most recently created tag.

        Raises
        ------
        TagNotFoundError
            If the repository has no tags.
        """
        tags = self.tags()
        if not tags:
            raise TagNotFoundError("", "no tags found")
        return tags[-1]

    def validate_tag(self, tag: str) -> str:
        """Resolve ``tag`` to the full sha of the commit it points at.

        ``tag`` can be a tag name, a (short) commit hash or any revision
        expression understood by ``git rev-parse``.

        Raises
        ------
        TagNotFoundError
            If the reference does not resolve to a commit.
        """
        result = self._run(
            ["rev-parse", "--verify", "--quiet", f"{tag}^{{commit}}"], check=False
        )
        sha = result.stdout.strip()
        if result.returncode != 0 or not sha:
            raise TagNotFoundError(tag)
        return sha

    def root_commit(self) -> str:
        """Return the sha of the oldest commit reachable from HEAD."""
        try:
            result = self._run(["rev-list", "--max-parents=0", "HEAD"], check=True)
        except GitError as exc:
            raise RepositoryUnavailableError(f"Could not find the first commit: {exc}") from exc
        roots = result.stdout.split()
        if not roots:
            raise RepositoryUnavailableError("Repository has no commits")
        # With several roots rev-list lists the newest first.
        return roots[-1]

    def previous_tag(self, current: str) -> str:
        """Return the tag created just before ``current``.

        If ``current`` is the earliest tag the sha of the first commit in
        the repository is returned instead, so "everything up to the first
        tag" is still a valid range.

        Raises
        ------
        TagNotFoundError
            If ``current`` does not resolve.
        """
        self.validate_tag(current)

        newest_first = list(reversed(self.tags()))
        try:
            index = newest_first.index(current)
        except ValueError:
            index = len(newest_first)
        if index + 1 < len(newest_first):
            return newest_first[index + 1]
        logger.debug("No tag before %s, falling back to the first commit", current)
        return self.root_commit()

    # ------------------------------------------------------------------
    # History walk
    # ------------------------------------------------------------------
    def commits_between(self, from_ref: str, to_ref: str) -> Iterator[Commit]:
        """Return the commits after ``from_ref`` up to and including ``to_ref``.

        The commits are yielded oldest first in topological order. The
        result is a single-pass generator. Commits that cannot be read are
        skipped instead of aborting the walk.

        Raises
        ------
        TagNotFoundError
            If either reference does not resolve.
        TwinTagsError
            If both references point at the same commit.
        """
        from_sha = self.validate_tag(from_ref)
        to_sha = self.validate_tag(to_ref)
        if from_sha == to_sha:
            raise TwinTagsError(from_ref, to_ref)

        result = self._run(
            ["rev-list", "--topo-order", "--reverse", f"{from_sha}..{to_sha}"],
            check=True,
        )
        shas = result.stdout.split()
        logger.debug("Found %d commit(s) between %s and %s", len(shas), from_ref, to_ref)
        return self._read_commits(shas)

    def _read_commits(self, shas: List[str]) -> Iterator[Commit]:
        if not shas:
            return
        # One process for the whole range; ids are passed on stdin so long
        # ranges do not hit the argument length limit.
        result = self._run(
            ["log", "--no-walk=unsorted", "--stdin", f"--format={_COMMIT_FORMAT}"],
            check=False,
            input="\n".join(shas) + "\n",
        )
        if result.returncode == 0:
            for record in result.stdout.split(_RECORD_SEP):
                if not record.strip():
                    continue
                commit = _parse_commit_record(record)
                if commit is None:
                    logger.debug("Skipping unreadable commit record %r", record[:80])
                    continue
                yield commit
            return

        logger.debug(
            "Could not read the range in one go, reading commits one by one: %s",
            result.stderr.strip(),
        )
        for sha in shas:
            commit = self.read_commit(sha)
            if commit is None:
                logger.debug("Skipping unreadable commit %s", sha)
                continue
            yield commit

    def read_commit(self, sha: str) -> Optional[Commit]:
        """Read a single commit, returning None if it cannot be read."""
        result = self._run(
            ["show", "-s", f"--format={_COMMIT_FORMAT}", sha], check=False
        )
        if result.returncode != 0:
            return None
        return _parse_commit_record(result.stdout.split(_RECORD_SEP, 1)[0])

    # ------------------------------------------------------------------
    # Remotes
    # ------------------------------------------------------------------
    def remote_url(self, remote: str = "origin") -> str:
        """Return the fetch URL configured for ``remote``.

        Raises
        ------
        RemoteURLError
            If the remote does not exist.
        """
        result = self._run(["remote", "get-url", remote], check=False)
        url = result.stdout.strip()
        if result.returncode != 0 or not url:
            raise RemoteURLError(
                f"Could not get the url of the repository at '{remote}'"
            )
        return url

    def repository_identity(self, remote: str = "origin") -> Union[Tuple[str, str], str]:
        """Return ``(owner, project)`` parsed from the URL of ``remote``.

        If the URL does not look like ``host[:/]owner/project[.git]`` the
        raw URL is returned unchanged.
        """
        url = self.remote_url(remote)
        return parse_remote_url(url)


def _parse_commit_record(record: str) -> Optional[Commit]:
    parts = record.lstrip("\n").split(_FIELD_SEP, 2)
    if len(parts) != 3:
        return None
    sha, summary, body = parts
    return Commit(sha=sha.strip(), summary=summary, body=body.strip("\n"))


def parse_remote_url(url: str) -> Union[Tuple[str, str], str]:
    """Split a remote URL into ``(owner, project)``.

    >>> parse_remote_url("git@github.com:arsham/git-release.git")
    ('arsham', 'git-release')
    >>> parse_remote_url("not a url")
    'not a url'
    """
    match = REMOTE_URL_RE.search(url.strip())
    if not match:
        logger.warning("Could not parse owner and project from remote URL: %s", url)
        return url
    return match.group("owner"), match.group("project")
