"""
Command line interface for the vc_release_notes tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``git-release`` command. It resolves the range
of commits to describe, renders the release notes and either prints them
or publishes them as a GitHub release.

Status messages are written to stderr so that stdout only carries the
rendered markdown.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

import click

from vc_release_notes import __version__
from vc_release_notes._version import version_banner
from vc_release_notes.config.loader import ConfigError, load_config
from vc_release_notes.grouping.commit_parser import CommitClassifier, CommitGrammar
from vc_release_notes.grouping.release import Release
from vc_release_notes.publish.github_client import GitHubClient, PublishError
from vc_release_notes.vcs.git_client import (
    GitClient,
    GitError,
    RemoteURLError,
    RepositoryUnavailableError,
)

# Create a module-level logger. Attach a null handler and disable
# propagation to avoid logging errors when the root logger's stream is
# closed (such as during unit tests). ``--verbose`` turns propagation back
# on for every package logger.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_RANGE_ERROR = 4
EXIT_CONFIG_ERROR = 5
EXIT_PUBLISH_FAILURE = 6

HEAD = "HEAD"


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------

def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}", err=True)


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}", err=True)


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def configure_logging(verbose: bool) -> None:
    """Configure the root logger and route package loggers to it."""
    # Use force=True to ensure handlers are reconfigured on subsequent
    # invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    if verbose:
        for name in list(logging.root.manager.loggerDict):
            if name.startswith("vc_release_notes"):
                logging.getLogger(name).propagate = True


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def parse_tag_option(tag: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Split the ``--tag`` value into ``(from, to)``.

    ``None`` in either position means "work it out from the tags":

    - no value: ``(None, None)``, the latest tag against the one before it
    - ``v0.2.0``: ``(None, "v0.2.0")``
    - ``v0.1.0..``: ``("v0.1.0", "HEAD")``
    - ``v0.1.0..v0.5.0``: ``("v0.1.0", "v0.5.0")``

    Raises
    ------
    click.BadParameter
        If the value is an empty or malformed range.
    """
    if tag is None:
        return None, None
    tag = tag.strip()
    if not tag:
        raise click.BadParameter("tag cannot be empty", param_hint="--tag")
    if ".." not in tag:
        return None, tag
    from_ref, _, to_ref = tag.partition("..")
    if not from_ref or ".." in to_ref:
        raise click.BadParameter(f"invalid range '{tag}'", param_hint="--tag")
    return from_ref, to_ref or HEAD


def resolve_range(client: GitClient, tag: Optional[str]) -> Tuple[str, str]:
    """Return the ``(from, to)`` references to describe.

    Raises
    ------
    GitError
        If the tags cannot be listed or a reference does not resolve.
    """
    from_ref, to_ref = parse_tag_option(tag)
    if to_ref is None:
        to_ref = client.latest_tag()
    if from_ref is None:
        from_ref = client.previous_tag(to_ref)
    logger.debug("Resolved range %s..%s", from_ref, to_ref)
    return from_ref, to_ref


def build_release(client: GitClient, from_ref: str, to_ref: str, classifier: CommitClassifier) -> Release:
    return Release(client.commits_between(from_ref, to_ref), classifier)


def publish_release(
    client: GitClient,
    tag: str,
    body: str,
    remote: str,
    token: str,
    api_url: str,
    request_timeout: float,
    force: bool,
) -> None:
    """Publish ``body`` as the GitHub release of ``tag``.

    Raises
    ------
    RemoteURLError
        If the owner and project cannot be read from the remote URL.
    PublishError
        If GitHub rejects the release.
    """
    identity = client.repository_identity(remote)
    if isinstance(identity, str):
        raise RemoteURLError(
            f"Could not find the owner and project in the url of '{remote}': {identity}"
        )
    owner, project = identity
    github = GitHubClient(
        token=token,
        owner=owner,
        project=project,
        api_url=api_url,
        request_timeout=request_timeout,
    )
    github.publish(tag, body, force=force)


def _print_version(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(version_banner(__version__))
    ctx.exit(EXIT_SUCCESS)


@click.command()
@click.option("-t", "--tag", "tag", help="Tag, or range of tags (FROM.., FROM..TO). Defaults to the latest tag.")
@click.option("-r", "--remote", "remote", default=None, help="The remote to operate on. Defaults to origin.")
@click.option("-p", "--publish", "publish", is_flag=True, help="Publish the release notes to GitHub.")
@click.option("--github-token", "github_token", envvar="GITHUB_TOKEN", show_envvar=True, help="Token used when publishing.")
@click.option("-f", "--force", "force", is_flag=True, help="If the release exists, replace its contents.")
@click.option("--path", "path", type=click.Path(file_okay=False, path_type=Path), default=".", help="Path inside the repository.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.option("--version", is_flag=True, expose_value=False, is_eager=True, callback=_print_version, help="Print the application version.")
def main(
    tag: Optional[str],
    remote: Optional[str],
    publish: bool,
    github_token: Optional[str],
    force: bool,
    path: Path,
    verbose: bool,
) -> None:
    """Make release notes, and optionally a GitHub release, for tags.

    \b
    Examples:
      git-release                       latest tag against the previous one
      git-release -t v0.1.0             a single tag against the previous one
      git-release -t v0.1.0..           a tag up to HEAD
      git-release -t v0.1.0..v0.5.0     v0.1.0 (excluding) to v0.5.0 (including)
    """
    configure_logging(verbose)

    try:
        try:
            config = load_config()
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        try:
            client = GitClient.open(path)
        except RepositoryUnavailableError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_NO_REPO)

        try:
            from_ref, to_ref = resolve_range(client, tag)
        except click.BadParameter as exc:
            print_error(exc.format_message())
            raise click.exceptions.Exit(EXIT_INVALID_USAGE)
        except GitError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_RANGE_ERROR)

        if publish and to_ref == HEAD:
            print_error("Publishing needs a tag to release, not HEAD.")
            raise click.exceptions.Exit(EXIT_INVALID_USAGE)
        token = github_token or config.get("github_token")
        if publish and not token:
            print_error("Publishing needs a GitHub token (--github-token or GITHUB_TOKEN).")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        classifier = CommitClassifier(CommitGrammar())
        try:
            release = build_release(client, from_ref, to_ref, classifier)
        except GitError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_RANGE_ERROR)
        logger.debug("Release %s..%s has %d commit(s)", from_ref, to_ref, len(release.commits))
        notes = release.render()

        if not publish:
            click.echo(notes)
            raise click.exceptions.Exit(EXIT_SUCCESS)

        remote_name = remote or config["remote"]
        try:
            publish_release(
                client,
                tag=to_ref,
                body=notes,
                remote=remote_name,
                token=token,
                api_url=config["api_url"],
                request_timeout=float(config["request_timeout"]),
                force=force,
            )
        except (RemoteURLError, PublishError) as exc:
            print_error(f"Failed to publish the release: {exc}")
            raise click.exceptions.Exit(EXIT_PUBLISH_FAILURE)
        except GitError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_GENERIC_ERROR)

        print_success(f"Published Release {to_ref}")
        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        # Click uses its own Exit exception; re-raise to let Click handle it
        raise
    except Exception as exc:
        # Catch any other unhandled errors
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
