"""The legacy v1alpha1 ``pkg.yaml`` format."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

_DEFAULT_SHELL = "/bin/sh"


@dataclass
class Options:
    """Legacy build options."""

    cache_to: str = ""
    cache_from: str = ""
    organization: str = ""
    platform: str = ""
    progress: str = ""
    push: str = ""
    registry: str = ""


@dataclass
class Dependency:
    """Dependency on another image."""

    image: str = ""
    to: str = ""


@dataclass
class Source:
    """A source archive to download."""

    url: str = ""
    destination: str = ""
    sha256: str = ""
    sha512: str = ""


@dataclass
class Step:
    """A single build step; each instruction is optional."""

    prepare: Optional[str] = None
    build: Optional[str] = None
    install: Optional[str] = None
    test: Optional[str] = None
    sources: list[Source] = field(default_factory=list)


@dataclass
class Finalize:
    """A copy instruction run at the end of the build."""

    from_: str = ""
    to: str = ""


class Variant(enum.Enum):
    """Kind of base image for the build."""

    ALPINE = 0
    SCRATCH = 1

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def from_string(cls, text: str) -> Variant:
        """Parse a variant name such as ``alpine``."""
        for variant in cls:
            if str(variant) == text:
                return variant
        raise ValueError(f'unknown variant "{text}"')


@dataclass
class Pkg:
    """A package definition in the v1alpha1 format."""

    name: str = ""
    bldr: str = ""
    install: list[str] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)
    finalize: list[Finalize] = field(default_factory=list)
    variant: Variant = Variant.ALPINE
    shell: str = ""
    version: str = ""
    options: Optional[Options] = None


def _scalar(value: Any, key: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list)):
        raise ValueError(f"{key}: expected a scalar value")
    return str(value)


def _optional_scalar(value: Any, key: str) -> Optional[str]:
    return None if value is None else _scalar(value, key)


def _mapping(value: Any, key: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{key}: expected a mapping")
    return value


def _items(value: Any, key: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{key}: expected a list")
    return value


def _source(data: Any) -> Source:
    data = _mapping(data, "sources")
    return Source(
        url=_scalar(data.get("url"), "url"),
        destination=_scalar(data.get("destination"), "destination"),
        sha256=_scalar(data.get("sha256"), "sha256"),
        sha512=_scalar(data.get("sha512"), "sha512"),
    )


def _step(data: Any) -> Step:
    data = _mapping(data, "steps")
    return Step(
        prepare=_optional_scalar(data.get("prepare"), "prepare"),
        build=_optional_scalar(data.get("build"), "build"),
        install=_optional_scalar(data.get("install"), "install"),
        test=_optional_scalar(data.get("test"), "test"),
        sources=[_source(item) for item in _items(data.get("sources"), "sources")],
    )


def _dependency(data: Any) -> Dependency:
    data = _mapping(data, "dependencies")
    return Dependency(
        image=_scalar(data.get("image"), "image"),
        to=_scalar(data.get("to"), "to"),
    )


def _finalize(data: Any) -> Finalize:
    data = _mapping(data, "finalize")
    return Finalize(
        from_=_scalar(data.get("from"), "from"),
        to=_scalar(data.get("to"), "to"),
    )


def _parse(data: Mapping[str, Any]) -> Pkg:
    variant_text = data.get("variant")
    variant = (
        Variant.ALPINE
        if variant_text is None
        else Variant.from_string(_scalar(variant_text, "variant"))
    )
    return Pkg(
        name=_scalar(data.get("name"), "name"),
        bldr=_scalar(data.get("bldr"), "bldr"),
        install=[_scalar(item, "install") for item in _items(data.get("install"), "install")],
        dependencies=[
            _dependency(item) for item in _items(data.get("dependencies"), "dependencies")
        ],
        steps=[_step(item) for item in _items(data.get("steps"), "steps")],
        finalize=[_finalize(item) for item in _items(data.get("finalize"), "finalize")],
        variant=variant,
        shell=_scalar(data.get("shell"), "shell"),
        version=_scalar(data.get("version"), "version"),
    )


def load_pkg(path: str | Path, options: Optional[Options]) -> Pkg:
    """Read a v1alpha1 package definition from ``path``."""
    contents = Path(path).read_text(encoding="utf-8")
    pkg = _parse(_mapping(yaml.safe_load(contents), "pkg"))
    if not pkg.shell:
        pkg.shell = _DEFAULT_SHELL
    pkg.options = options
    return pkg