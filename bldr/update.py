"""Checking package sources for available updates."""

from __future__ import annotations

from urllib.parse import urlsplit

from bldr.github import GitHub, LatestInfo, token_from_env


def latest(source: str) -> LatestInfo:
    """Return information about an update available for ``source``."""
    host = urlsplit(source).netloc.rpartition("@")[2]
    if host == "github.com":
        return GitHub(token_from_env()).latest(source)
    raise ValueError(f'unhandled host "{host}"')