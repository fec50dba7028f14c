"""
Client for publishing release notes to GitHub.

This client wraps the few GitHub REST API calls needed to create a
release for a tag, or to overwrite an existing one. On error conditions
(HTTP errors, timeouts, unexpected payloads) a :class:`PublishError` is
raised.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests


logger = logging.getLogger(__name__)
# Attach a null handler to avoid errors when the root logger is missing a
# stream. Messages will still propagate to the root logger if configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_API_URL = "https://api.github.com"


class PublishError(Exception):
    """Raised when communication with GitHub fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ReleaseExistsError(PublishError):
    """Raised when a release already exists for the tag."""

    pass


def release_name(tag: str) -> str:
    return f"Release {tag}"


@dataclass
class GitHubClient:
    """Client for the releases endpoints of one GitHub repository.

    Parameters
    ----------
    token : str
        Personal access token used for authentication.
    owner : str
        Owner of the repository, e.g. ``"arsham"``.
    project : str
        Name of the repository, e.g. ``"git-release"``.
    api_url : str, optional
        Base URL of the API. Defaults to ``https://api.github.com``.
    request_timeout : float, optional
        Timeout in seconds for HTTP requests. Defaults to 30 seconds.
    """

    token: str
    owner: str
    project: str
    api_url: str = DEFAULT_API_URL
    request_timeout: float = 30.0

    def _endpoint(self, path: str = "") -> str:
        return f"{self.api_url.rstrip('/')}/repos/{self.owner}/{self.project}/releases{path}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
        }

    def _request(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        logger.debug("Sending %s request to %s", method, url)
        try:
            response = requests.request(
                method,
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.request_timeout,
            )
        except requests.RequestException as exc:
            logger.error("Failed to connect to GitHub: %s", exc)
            raise PublishError(str(exc)) from exc

        if response.status_code == 422:
            # GitHub answers 422 with an "already_exists" error when the tag
            # already has a release.
            logger.debug("GitHub rejected the request: %s", response.text)
            raise ReleaseExistsError(
                f"GitHub returned status 422: {response.text}", status_code=422
            )
        if not 200 <= response.status_code < 300:
            logger.error(
                "GitHub returned status %s: %s", response.status_code, response.text
            )
            raise PublishError(
                f"GitHub returned status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Failed to parse GitHub response: %s", exc)
            raise PublishError("Failed to parse GitHub response") from exc
        if not isinstance(data, dict):
            raise PublishError("Unexpected response structure from GitHub")
        return data

    def create_release(self, tag: str, body: str) -> Dict[str, Any]:
        """Create a release named ``Release <tag>`` for ``tag``.

        Raises
        ------
        ReleaseExistsError
            If the tag already has a release.
        PublishError
            If the request fails.
        """
        payload = {"tag_name": tag, "name": release_name(tag), "body": body}
        return self._request("POST", self._endpoint(), payload)

    def release_id(self, tag: str) -> int:
        """Return the id of the release attached to ``tag``."""
        data = self._request("GET", self._endpoint(f"/tags/{tag}"))
        if "id" not in data:
            raise PublishError("Unexpected response structure from GitHub")
        return int(data["id"])

    def update_release(self, release_id: int, tag: str, body: str) -> Dict[str, Any]:
        """Replace the name and body of an existing release."""
        payload = {"name": release_name(tag), "body": body}
        return self._request("PATCH", self._endpoint(f"/{release_id}"), payload)

    def publish(self, tag: str, body: str, force: bool = False) -> Dict[str, Any]:
        """Create the release, or overwrite the existing one if ``force`` is set.

        Raises
        ------
        ReleaseExistsError
            If the release exists and ``force`` is False.
        PublishError
            If any request fails.
        """
        try:
            return self.create_release(tag, body)
        except ReleaseExistsError:
            if not force:
                raise
            logger.info("Release for %s exists, updating it", tag)
        existing = self.release_id(tag)
        return self.update_release(existing, tag, body)
