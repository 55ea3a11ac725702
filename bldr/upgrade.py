"""Upgrade package definitions from the v1alpha1 format to v1alpha2."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from bldr import v1alpha1
from bldr.dependency import Dependency
from bldr.pkg import Pkg
from bldr.source import Source
from bldr.steps import Finalize, Step, Variant

_LEGACY_DEFAULT_SHELL = "/bin/sh"


def _convert_dependencies(
    stage_names: Sequence[str], old: Iterable[v1alpha1.Dependency]
) -> list[Dependency]:
    converted = []
    for dep in old:
        name = dep.image.split(":", 1)[0].split("/")[-1]
        if name in stage_names:
            converted.append(Dependency(stage=name, to=dep.to))
        else:
            converted.append(Dependency(image=dep.image, to=dep.to))
    return converted


def _instructions(instruction: str | None) -> list[str]:
    return [] if instruction is None else [instruction]


def _convert_steps(old: Iterable[v1alpha1.Step]) -> list[Step]:
    return [
        Step(
            prepare=_instructions(step.prepare),
            build=_instructions(step.build),
            install=_instructions(step.install),
            test=_instructions(step.test),
            sources=[
                Source(
                    url=src.url,
                    destination=src.destination,
                    sha256=src.sha256,
                    sha512=src.sha512,
                )
                for src in step.sources
            ],
        )
        for step in old
    ]


def _convert_finalize(old: Iterable[v1alpha1.Finalize]) -> list[Finalize]:
    return [Finalize(from_=fin.from_, to=fin.to) for fin in old]


def from_v1alpha1(old_pkg: v1alpha1.Pkg, stage_names: Sequence[str]) -> Pkg:
    """Convert a v1alpha1 package into the v1alpha2 format.

    Images whose base name matches one of ``stage_names`` become stage
    dependencies. The legacy default shell is dropped from ``old_pkg``.
    """
    if old_pkg.shell == _LEGACY_DEFAULT_SHELL:
        old_pkg.shell = ""

    return Pkg(
        name=old_pkg.name,
        install=list(old_pkg.install),
        dependencies=_convert_dependencies(stage_names, old_pkg.dependencies),
        steps=_convert_steps(old_pkg.steps),
        finalize=_convert_finalize(old_pkg.finalize),
        variant=Variant(old_pkg.variant.value),
        shell=old_pkg.shell,
    )