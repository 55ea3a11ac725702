"""Build sources downloaded and verified by checksum."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urlsplit

import requests

from bldr.dependency import MultiError, collect_errors


@dataclass
class Source:
    """A build source to be downloaded."""

    url: str = ""
    destination: str = ""
    sha256: str = ""
    sha512: str = ""

    def to_sha512sum(self) -> bytes:
        """Return the line expected by ``sha512sum -c``."""
        return f"{self.sha512} *{self.destination}\n".encode()

    def validate(self) -> None:
        """Raise ``MultiError`` listing every problem with the source."""
        errors = MultiError()
        if not self.url:
            errors.append(ValueError("source.url can't be empty"))
        else:
            try:
                urlsplit(self.url)
            except ValueError as error:
                errors.append(ValueError(f'error parsing source.url "{self.url}": {error}'))
        if not self.destination:
            errors.append(ValueError("source.destination can't be empty"))
        if not self.sha256:
            errors.append(ValueError("source.sha256 can't be empty"))
        elif len(self.sha256) != 64:
            errors.append(ValueError("source.sha256 should be 64 chars long"))
        if not self.sha512:
            errors.append(ValueError("source.sha512 can't be empty"))
        elif len(self.sha512) != 128:
            errors.append(ValueError("source.sha512 should be 128 chars long"))
        errors.raise_if_any()

    def validate_checksums(self) -> tuple[str, str]:
        """Download the source and return its actual SHA-256 and SHA-512.

        On mismatch a ``MultiError`` is raised whose ``sha256`` and ``sha512``
        attributes hold the actual checksums.
        """
        s256 = hashlib.sha256()
        s512 = hashlib.sha512()
        with requests.get(self.url, stream=True, timeout=None) as response:
            for chunk in response.iter_content(chunk_size=65536):
                s256.update(chunk)
                s512.update(chunk)
        actual256, actual512 = s256.hexdigest(), s512.hexdigest()
        errors = MultiError()
        if self.sha256 != actual256:
            errors.append(
                ValueError(f"source.sha256 does not match: expected {self.sha256}, got {actual256}")
            )
        if self.sha512 != actual512:
            errors.append(
                ValueError(f"source.sha512 does not match: expected {self.sha512}, got {actual512}")
            )
        errors.sha256 = actual256
        errors.sha512 = actual512
        errors.raise_if_any()
        return actual256, actual512


def validate_sources(sources: Iterable[Source]) -> None:
    """Validate every source, raising ``MultiError`` on failures."""
    collect_errors(source.validate for source in sources)