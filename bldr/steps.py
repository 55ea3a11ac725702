"""Build steps, instructions, shells, variants and finalize copies."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field

from bldr.dependency import collect_errors
from bldr.source import Source, validate_sources

DEFAULT_SHELL = "/bin/sh"


def script(instruction: str) -> str:
    """Format an instruction for ``sh -c`` execution."""
    return "set -eou pipefail\n" + instruction


def get_shell(shell: str) -> str:
    """Return the shell to use, defaulting to ``/bin/sh``."""
    return shell or DEFAULT_SHELL


class Variant(enum.Enum):
    """Kind of base image for the build."""

    ALPINE = 0
    SCRATCH = 1

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def from_string(cls, text: str) -> Variant:
        """Parse a variant name such as ``scratch``."""
        for variant in cls:
            if str(variant) == text:
                return variant
        raise ValueError(f'unknown variant "{text}"')


@dataclass
class Finalize:
    """A copy instruction that finalizes the build."""

    from_: str = ""
    to: str = ""


@dataclass
class Step:
    """A single build step, run in its own temporary directory."""

    sources: list[Source] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    prepare: list[str] = field(default_factory=list)
    build: list[str] = field(default_factory=list)
    install: list[str] = field(default_factory=list)
    test: list[str] = field(default_factory=list)
    tmp_dir: str = ""

    def validate(self) -> None:
        """Validate the step's sources."""
        validate_sources(self.sources)


def validate_steps(steps: Iterable[Step]) -> None:
    """Validate every step, raising ``MultiError`` on failures."""
    collect_errors(step.validate for step in steps)