"""The v1alpha2 ``pkg.yaml`` and ``Pkgfile`` formats."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

from bldr.dependency import Dependency, MultiError, collect_errors
from bldr.source import Source
from bldr.steps import Finalize, Step, Variant, validate_steps
from bldr.template import render
from bldr.dependency import validate_dependencies
from bldr.variables import Variables

SUPPORTED_FORMATS = ["v1alpha2"]


@dataclass
class Pkg:
    """Build instructions for a single package."""

    name: str = ""
    variant: Variant = Variant.ALPINE
    shell: str = "/bin/sh"
    install: list[str] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)
    finalize: list[Finalize] = field(default_factory=list)
    base_dir: str = ""
    file_name: str = ""

    def validate(self) -> None:
        """Raise ``MultiError`` listing every problem with the package."""
        errors = MultiError()
        if not self.name:
            errors.append(ValueError("package name can't be empty"))
        if self.steps and not self.finalize:
            errors.append(
                ValueError("finalize steps are missing, this is going to lead to empty build")
            )
        for check in (lambda: validate_steps(self.steps), lambda: validate_dependencies(self.dependencies)):
            try:
                check()
            except ValueError as error:
                errors.append(error)
        errors.raise_if_any()


@dataclass
class Pkgfile:
    """The root ``Pkgfile`` description."""

    format: str = ""
    vars: Variables = field(default_factory=Variables)
    labels: dict[str, str] = field(default_factory=dict)


def _scalar(value: Any, key: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list)):
        raise ValueError(f"{key}: expected a scalar value")
    return str(value)


def _mapping(value: Any, key: str) -> Mapping[Any, Any]:
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


def _strings(value: Any, key: str) -> list[str]:
    return [_scalar(item, key) for item in _items(value, key)]


def _string_map(value: Any, key: str) -> dict[str, str]:
    return {str(k): _scalar(v, key) for k, v in _mapping(value, key).items()}


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
        sources=[_source(item) for item in _items(data.get("sources"), "sources")],
        env=_string_map(data.get("env"), "env"),
        prepare=_strings(data.get("prepare"), "prepare"),
        build=_strings(data.get("build"), "build"),
        install=_strings(data.get("install"), "install"),
        test=_strings(data.get("test"), "test"),
    )


def _dependency(data: Any) -> Dependency:
    data = _mapping(data, "dependencies")
    runtime = data.get("runtime", False)
    if not isinstance(runtime, bool):
        raise ValueError("runtime: expected a boolean")
    return Dependency(
        image=_scalar(data.get("image"), "image"),
        stage=_scalar(data.get("stage"), "stage"),
        to=_scalar(data.get("to"), "to"),
        runtime=runtime,
    )


def _finalize(data: Any) -> Finalize:
    data = _mapping(data, "finalize")
    return Finalize(from_=_scalar(data.get("from"), "from"), to=_scalar(data.get("to"), "to"))


def load_pkg(
    base_dir: str, file_name: str, contents: bytes | str, variables: Mapping[str, str]
) -> Pkg:
    """Render, parse and validate a ``pkg.yaml`` document."""
    text = contents.decode("utf-8") if isinstance(contents, bytes) else contents
    data = yaml.safe_load(render(text, variables))
    if data is None:
        raise ValueError("empty package document")
    data = _mapping(data, "pkg")
    pkg = Pkg(base_dir=base_dir, file_name=file_name)
    if data.get("name") is not None:
        pkg.name = _scalar(data["name"], "name")
    if data.get("variant") is not None:
        pkg.variant = Variant.from_string(_scalar(data["variant"], "variant"))
    if data.get("shell"):
        pkg.shell = _scalar(data["shell"], "shell")
    pkg.install = _strings(data.get("install"), "install")
    pkg.dependencies = [_dependency(d) for d in _items(data.get("dependencies"), "dependencies")]
    pkg.steps = [_step(s) for s in _items(data.get("steps"), "steps")]
    pkg.finalize = [_finalize(f) for f in _items(data.get("finalize"), "finalize")]
    pkg.validate()
    return pkg


def load_pkgfile(contents: bytes | str) -> Pkgfile:
    """Parse a ``Pkgfile`` document."""
    data = _mapping(yaml.safe_load(contents), "Pkgfile")
    pkgfile = Pkgfile(
        format=_scalar(data.get("format"), "format"),
        vars=Variables(_string_map(data.get("vars"), "vars")),
        labels=_string_map(data.get("labels"), "labels"),
    )
    if pkgfile.format not in SUPPORTED_FORMATS:
        raise ValueError(
            f'unsupported format: "{pkgfile.format}", supported formats: ["v1alpha2"]'
        )
    return pkgfile


__all__ = ["Pkg", "Pkgfile", "load_pkg", "load_pkgfile", "collect_errors"]