"""A collection of packages with dependency resolution."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from bldr.graph import PackageDependency, PackageGraph, PackageNode
from bldr.loader import PackageLoader
from bldr.pkg import Pkg, Pkgfile


class Packages:
    """Packages keyed by name, with the ``Pkgfile`` they were loaded with."""

    def __init__(
        self, packages: Optional[Mapping[str, Pkg]] = None, pkgfile: Optional[Pkgfile] = None
    ) -> None:
        self.packages: dict[str, Pkg] = dict(packages or {})
        self.pkgfile = pkgfile

    def _resolve(
        self, name: str, path: list[str], cache: dict[str, PackageNode]
    ) -> PackageNode:
        cached = cache.get(name)
        if cached is not None:
            return cached

        pkg = self.packages.get(name)
        if pkg is None:
            raise ValueError(f'package "{name}" not defined')

        if name in path:
            raise ValueError(f'circular dependency detected [{" ".join(path)}] -> "{name}"')

        path = [*path, name]
        node = PackageNode(pkg=pkg, name=name)

        for dep in pkg.dependencies:
            dep_node = None
            if dep.is_internal():
                try:
                    dep_node = self._resolve(dep.stage, path, cache)
                except ValueError as error:
                    raise ValueError(
                        f'error resolving dependency "{dep.stage}" of "{name}": {error}'
                    ) from error
            node.dependencies.append(PackageDependency.from_dependency(dep, dep_node))

        cache[name] = node
        return node

    def resolve(self, target: str) -> PackageGraph:
        """Build the dependency graph rooted at ``target``."""
        return PackageGraph(root=self._resolve(target, [], {}))

    def to_set(self) -> list[PackageNode]:
        """Return a node for every package, with dependencies left unresolved."""
        return [
            PackageNode(
                pkg=pkg,
                name=name,
                dependencies=[PackageDependency.from_dependency(dep) for dep in pkg.dependencies],
            )
            for name, pkg in self.packages.items()
        ]

    def image_labels(self) -> dict[str, str]:
        """Return labels to apply to the output image."""
        return dict(self.pkgfile.labels) if self.pkgfile is not None else {}


def load_packages(loader: PackageLoader) -> Packages:
    """Load packages through ``loader``, rejecting duplicate names."""
    result = loader.load()
    packages: dict[str, Pkg] = {}
    for pkg in result.pkgs:
        duplicate = packages.get(pkg.name)
        if duplicate is not None:
            raise ValueError(
                f'package "{pkg.name}" already exists, duplicate in dirs '
                f'"{pkg.base_dir}" and "{duplicate.base_dir}"'
            )
        packages[pkg.name] = pkg
    return Packages(packages, result.pkgfile)