"""Semantic versions and extracting them from file names and URLs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

SEMVER_PATTERN = (
    r"v?([0-9]+)(\.[0-9]+)?(\.[0-9]+)?"
    r"(-([0-9A-Za-z\-]+(\.[0-9A-Za-z\-]+)*))?"
    r"(\+([0-9A-Za-z\-]+(\.[0-9A-Za-z\-]+)*))?"
)
"""Pattern of a (loosely written) semantic version, without anchors."""

_VERSION_RE = re.compile(SEMVER_PATTERN)

COMMON_EXTENSIONS = frozenset(
    {".bz2", ".diff", ".gz", ".orig", ".src", ".tar", ".xdp", ".xz"}
)
"""Extensions stripped before looking for a version, as they confuse the parser."""


@dataclass(frozen=True)
class Version:
    """A semantic version; missing minor and patch numbers are zero."""

    major: int
    minor: int = 0
    patch: int = 0
    prerelease: str = ""
    metadata: str = ""
    original: str = field(default="", compare=False)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.metadata:
            text += f"+{self.metadata}"
        return text


def parse_version(text: str) -> Version:
    """Parse ``text`` as a whole semantic version, such as ``v1.2`` or ``1.2.3-rc.1``."""
    match = _VERSION_RE.fullmatch(text)
    if match is None:
        raise ValueError("Invalid Semantic Version")

    def number(group: str | None) -> int:
        return int(group.lstrip(".")) if group else 0

    return Version(
        major=int(match.group(1)),
        minor=number(match.group(2)),
        patch=number(match.group(3)),
        prerelease=match.group(5) or "",
        metadata=match.group(8) or "",
        original=text,
    )


def _extension(text: str) -> str:
    last = text.rsplit("/", 1)[-1]
    index = last.rfind(".")
    return last[index:] if index >= 0 else ""


def extract_version(text: str) -> Version:
    """Extract the version from a file name or URL.

    Common archive extensions are removed first; the last version found wins,
    so that host names and directories earlier in a URL are skipped.
    """
    while (ext := _extension(text)) in COMMON_EXTENSIONS:
        text = text[: -len(ext)]

    matches = [match.group(0) for match in _VERSION_RE.finditer(text)]
    if not matches:
        raise ValueError(f'failed to find version in "{text}"')

    try:
        return parse_version(matches[-1])
    except ValueError as error:
        raise ValueError(f'"{text}": {error}') from error