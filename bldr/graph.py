"""Dependency graph of packages and its ``dot`` rendering."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional, TextIO

from bldr.dependency import Dependency
from bldr.pkg import Pkg


def _format_attrs(attrs: dict[str, str]) -> str:
    if not attrs:
        return ""
    body = ",".join(
        f"{key}={json.dumps(value, ensure_ascii=False)}" for key, value in sorted(attrs.items())
    )
    return f"[{body}]"


class DotGraph:
    """A directed graph written in the ``dot`` language; nodes are keyed by label."""

    def __init__(self) -> None:
        self.nodes: dict[str, dict[str, str]] = {}
        self.edges: list[tuple[str, str, dict[str, str]]] = []

    def node(self, name: str, **kwargs: str) -> str:
        """Add a node (or update an existing one) and return its name."""
        self.nodes.setdefault(name, {}).update(kwargs)
        return name

    def edge(self, source: str, target: str, **kwargs: str) -> None:
        """Add an edge from ``source`` to ``target``."""
        self.node(source)
        self.node(target)
        self.edges.append((source, target, dict(kwargs)))

    def write(self, stream: TextIO) -> None:
        """Write the graph to ``stream`` in ``dot`` format."""
        ids = {name: f"n{index}" for index, name in enumerate(self.nodes, 1)}
        stream.write("digraph {\n")
        for name, attrs in self.nodes.items():
            stream.write(f"\t{ids[name]}{_format_attrs({**attrs, 'label': name})};\n")
        for source, target, attrs in self.edges:
            stream.write(f"\t{ids[source]}->{ids[target]}{_format_attrs(attrs)};\n")
        stream.write("}\n")


@dataclass
class PackageDependency(Dependency):
    """A dependency with its internal stage resolved to a node."""

    node: Optional[PackageNode] = None

    @classmethod
    def from_dependency(
        cls, dependency: Dependency, node: Optional[PackageNode] = None
    ) -> PackageDependency:
        """Wrap ``dependency``, attaching the resolved ``node`` if any."""
        values = {f.name: getattr(dependency, f.name) for f in dataclasses.fields(Dependency)}
        return cls(**values, node=node)

    def id(self) -> str:
        """Return a string identifying the dependency."""
        return f"{self.image}-{self.stage}-{self.to}"


@dataclass(eq=False)
class PackageNode:
    """A package together with its dependencies."""

    pkg: Pkg
    name: str
    dependencies: list[PackageDependency] = field(default_factory=list)

    def dump_dot(self, graph: DotGraph) -> str:
        """Add the node and its dependencies to ``graph``; return the node name."""
        this = graph.node(self.name)

        for dep in self.dependencies:
            if dep.is_internal():
                dep_node = graph.node(dep.stage)
            else:
                dep_node = graph.node(
                    dep.image, shape="box", fillcolor="lemonchiffon", style="filled"
                )
            if dep.runtime:
                graph.edge(dep_node, this, style="bold", color="forestgreen")
            else:
                graph.edge(dep_node, this)

        for package in self.pkg.install:
            package_node = graph.node(
                "Alpine: " + package, shape="box", fillcolor="aquamarine", style="filled"
            )
            graph.edge(package_node, this)

        return this

    def runtime_dependencies(self) -> list[PackageDependency]:
        """Return all runtime dependencies, following them recursively."""
        deps: list[PackageDependency] = []
        for dep in self.dependencies:
            if not dep.runtime:
                continue
            deps.append(dep)
            if dep.node is not None:
                deps.extend(dep.node.runtime_dependencies())
        return deps


@dataclass
class PackageGraph:
    """The root of a resolved package DAG."""

    root: PackageNode

    def to_set(self) -> list[PackageNode]:
        """Return every node reachable from the root, each once, root first."""
        result: list[PackageNode] = []
        seen: set[int] = set()

        def visit(node: PackageNode) -> None:
            if id(node) in seen:
                return
            seen.add(id(node))
            result.append(node)
            for dep in node.dependencies:
                if dep.node is not None:
                    visit(dep.node)

        visit(self.root)
        return result


def dump_dot(nodes: Iterable[PackageNode], stream: TextIO) -> None:
    """Write ``nodes`` and their dependencies to ``stream`` as a ``dot`` graph."""
    graph = DotGraph()
    for node in nodes:
        node.dump_dot(graph)
    graph.write(stream)