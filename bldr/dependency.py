"""Package dependencies and aggregated validation errors."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Optional


class MultiError(ValueError):
    """A collection of errors reported together."""

    def __init__(self, errors: Iterable[Optional[BaseException]] = ()) -> None:
        super().__init__()
        self.errors: list[BaseException] = []
        for error in errors:
            self.append(error)

    def append(self, error: Optional[BaseException]) -> MultiError:
        """Add ``error``; ``None`` is ignored and nested collections are flattened."""
        if error is None:
            return self
        if isinstance(error, MultiError):
            self.errors.extend(error.errors)
        else:
            self.errors.append(error)
        return self

    def raise_if_any(self) -> None:
        """Raise this collection if it holds at least one error."""
        if self.errors:
            raise self

    def __iter__(self) -> Iterator[BaseException]:
        return iter(self.errors)

    def __str__(self) -> str:
        if len(self.errors) == 1:
            return f"1 error occurred:\n\t* {self.errors[0]}\n\n"
        points = "\n\t".join(f"* {error}" for error in self.errors)
        return f"{len(self.errors)} errors occurred:\n\t{points}\n\n"


def collect_errors(validators: Iterable) -> None:
    """Call every validator, raising all of their errors together."""
    errors = MultiError()
    for validate in validators:
        try:
            validate()
        except ValueError as error:
            errors.append(error)
    errors.raise_if_any()


@dataclass
class Dependency:
    """Dependency on another image or stage."""

    image: str = ""
    stage: str = ""
    to: str = ""
    runtime: bool = False

    def is_internal(self) -> bool:
        """Whether the dependency refers to a stage of this build."""
        return self.stage != ""

    def src(self) -> str:
        """Copy source inside the dependency."""
        return "/"

    def dest(self) -> str:
        """Copy destination inside the base."""
        return self.to or "/"

    def validate(self) -> None:
        """Raise ``ValueError`` if the dependency is malformed."""
        if self.image and self.stage:
            raise ValueError(
                f'dependency can\'t have both image & stage set: "{self.image}", "{self.stage}"'
            )
        if not self.image and not self.stage:
            raise ValueError("either image or stage should be set for the dependency")


def validate_dependencies(dependencies: Iterable[Dependency]) -> None:
    """Validate every dependency, raising ``MultiError`` on failures."""
    collect_errors(dep.validate for dep in dependencies)