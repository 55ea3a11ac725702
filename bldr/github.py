"""Checking GitHub releases and tags for newer versions of a source."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from urllib.parse import urlsplit

import requests

from bldr.version import extract_version

MAX_PER_PAGE = 100
TIMEOUT = 15.0
API_URL = "https://api.github.com"

_TOKEN_HINT = "\nSet `BLDR_GITHUB_TOKEN` or `GITHUB_TOKEN` environment variable"


class GitHubError(RuntimeError):
    """Raised when the GitHub API request fails."""


class RateLimitError(GitHubError):
    """Raised when the GitHub API rate limit is exhausted."""


@dataclass
class LatestInfo:
    """Information about an available update."""

    has_update: bool = False
    base_url: str = ""
    latest_url: str = ""


def token_from_env() -> str:
    """Return the GitHub token from the environment, or an empty string."""
    return os.environ.get("BLDR_GITHUB_TOKEN", "") or os.environ.get("GITHUB_TOKEN", "")


def tag_tarball_url(owner: str, repo: str, name: str) -> str:
    """Return the ``.tar.gz`` download URL of a tag."""
    return f"https://github.com/{owner}/{repo}/archive/refs/tags/{name}.tar.gz"


def _host(url: str) -> str:
    return urlsplit(url).netloc.rpartition("@")[2]


def _repository(path: str) -> tuple[str, str]:
    parts = path.split("/")
    if len(parts) < 3:
        raise ValueError(f'no repository in path "{path}"')
    return parts[1], parts[2]


def _parse_time(text: Optional[str]) -> datetime:
    if not text:
        raise ValueError("missing timestamp")
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def _with_hint(error: GitHubError) -> GitHubError:
    if isinstance(error, RateLimitError):
        return RateLimitError(f"{error}{_TOKEN_HINT}")
    return error


class GitHub:
    """A client looking up the newest release or tag of a GitHub repository."""

    def __init__(
        self,
        token: str = "",
        session: Optional[requests.Session] = None,
        api_url: str = API_URL,
        timeout: float = TIMEOUT,
    ) -> None:
        self.session = session or requests.Session()
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"Accept": "application/vnd.github.v3+json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def latest(self, source: str) -> LatestInfo:
        """Return information about an update available for ``source``."""
        parsed = urlsplit(source)
        host = _host(source)
        if host != "github.com":
            raise ValueError(f'unexpected host "{host}"')

        owner, repo = _repository(parsed.path)
        consider_prereleases = extract_version(source).prerelease != ""
        source_url = parsed.geturl()

        try:
            releases = self._list(owner, repo, "releases")
        except GitHubError as error:
            raise _with_hint(error) from error

        if releases:
            return self._find_latest_release(
                releases, source_url, owner, repo, consider_prereleases
            )

        try:
            tags = self._list(owner, repo, "tags")
        except GitHubError as error:
            raise _with_hint(error) from error

        return self._find_latest_tag(tags, source_url, owner, repo, consider_prereleases)

    def _find_latest_release(
        self,
        releases: list[dict[str, Any]],
        source: str,
        owner: str,
        repo: str,
        consider_prereleases: bool,
    ) -> LatestInfo:
        newest: Optional[dict[str, Any]] = None
        newest_at: Optional[datetime] = None

        for release in releases:
            if release.get("prerelease") and not consider_prereleases:
                continue
            created = _parse_time(release.get("created_at"))
            if newest_at is None or newest_at < created:
                newest, newest_at = release, created

        if newest is None:
            raise ValueError("no release found")

        result = LatestInfo(base_url=f"https://github.com/{owner}/{repo}/releases/")
        assets = newest.get("assets") or []

        # no update if the newest release offers the very same download
        if any(asset.get("browser_download_url") == source for asset in assets):
            result.latest_url = source
            return result

        latest_tar_gz = tag_tarball_url(owner, repo, newest.get("tag_name", ""))
        if latest_tar_gz == source:
            result.latest_url = source
            return result

        # with extra assets the right one is unknown
        if not assets:
            result.latest_url = latest_tar_gz

        result.has_update = True
        return result

    def _find_latest_tag(
        self,
        tags: list[dict[str, Any]],
        source: str,
        owner: str,
        repo: str,
        consider_prereleases: bool,
    ) -> LatestInfo:
        newest: Optional[dict[str, Any]] = None
        newest_date: Optional[datetime] = None

        for tag in tags:
            version = extract_version(tag.get("name", ""))
            if version.prerelease and not consider_prereleases:
                continue
            sha = (tag.get("commit") or {}).get("sha", "")
            tag_date = self._commit_time(owner, repo, sha)
            if newest_date is None or newest_date < tag_date:
                newest, newest_date = tag, tag_date

        if newest is None:
            raise ValueError("no tag found")

        latest_url = tag_tarball_url(owner, repo, newest.get("name", ""))
        return LatestInfo(
            has_update=latest_url != source,
            base_url=f"https://github.com/{owner}/{repo}/releases/",
            latest_url=latest_url,
        )

    def _get(self, url: str, params: Optional[dict[str, Any]] = None) -> requests.Response:
        try:
            response = self.session.get(
                url, params=params, headers=self.headers, timeout=self.timeout
            )
        except requests.RequestException as error:
            raise GitHubError(str(error)) from error

        if response.ok:
            return response

        try:
            message = response.json().get("message", "")
        except ValueError:
            message = response.text
        text = f"GET {response.url}: {response.status_code} {message}".rstrip()
        if response.status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0":
            raise RateLimitError(text)
        raise GitHubError(text)

    def _list(self, owner: str, repo: str, kind: str) -> list[dict[str, Any]]:
        url: Optional[str] = f"{self.api_url}/repos/{owner}/{repo}/{kind}"
        params: Optional[dict[str, Any]] = {"per_page": MAX_PER_PAGE}
        items: list[dict[str, Any]] = []
        while url:
            response = self._get(url, params)
            items.extend(response.json())
            url = response.links.get("next", {}).get("url")
            params = None
        return items

    def _commit_time(self, owner: str, repo: str, sha: str) -> datetime:
        data = self._get(f"{self.api_url}/repos/{owner}/{repo}/commits/{sha}").json()
        date = ((data.get("commit") or {}).get("committer") or {}).get("date")
        if not date:
            raise ValueError("no commit date")
        return _parse_time(date)