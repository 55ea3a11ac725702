"""Variables used for templating and build environments."""

from __future__ import annotations

from collections.abc import Mapping


class Variables(dict):
    """A mapping of variable names to string values."""

    def merge(self, other: Mapping[str, str] | None) -> Variables:
        """Copy every entry of ``other`` into this mapping and return it."""
        if other:
            self.update(other)
        return self