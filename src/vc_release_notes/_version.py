"""
Dynamic version information for vc_release_notes.

When the package runs from a Git checkout the version is taken from
``git describe --tags --abbrev`` and the commit from the short HEAD sha.
Outside a checkout the static base version is used and the commit is
reported as ``unknown``.
"""

import subprocess
from pathlib import Path
from typing import Optional


PACKAGE_DIR = Path(__file__).resolve().parent


def _git(args, repo_path: Optional[Path]) -> str:
    cmd = ["git", "-C", str(repo_path or PACKAGE_DIR)] + list(args)
    result = subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        check=True
    )
    return result.stdout.strip()


def get_git_commit_sha(repo_path: Optional[Path] = None) -> str:
    """
    Get the short commit SHA of the current HEAD.

    Args:
        repo_path: Path inside the repository. Defaults to the package directory.

    Returns:
        Short commit SHA (7 characters) or 'unknown' if not in a git repo.
    """
    try:
        return _git(["rev-parse", "--short=7", "HEAD"], repo_path) or "unknown"
    except (subprocess.CalledProcessError, FileNotFoundError):
        return "unknown"


def get_describe_version(repo_path: Optional[Path] = None) -> Optional[str]:
    """
    Get the version described by the nearest tag.

    A leading ``v`` is dropped, so ``v0.3.1-2-gabc1234`` becomes
    ``0.3.1-2-gabc1234``.

    Returns:
        The described version, or None if there is no tag or no repo.
    """
    try:
        described = _git(["describe", "--abbrev", "--tags"], repo_path)
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
    if not described:
        return None
    return described[1:] if described.startswith("v") else described


def generate_version(base_version: str, repo_path: Optional[Path] = None) -> str:
    """
    Generate the version string.

    Args:
        base_version: Version used when no tag can be described (e.g. "0.1.0")
        repo_path: Path inside the repository. Defaults to the package directory.

    Returns:
        The tag based version, or ``base_version``.
    """
    return get_describe_version(repo_path) or base_version


def version_banner(version: str, repo_path: Optional[Path] = None) -> str:
    """Return the text printed by ``git-release --version``."""
    return f"git-release version: {version}, git commit: {get_git_commit_sha(repo_path)}"
