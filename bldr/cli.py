"""Command line interface for building and inspecting packages."""

from __future__ import annotations

import argparse
import logging
import platform
import sys
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, TextIO

import requests

from bldr.dependency import MultiError
from bldr.environment import LINUX_AMD64, Options, Platform, get_platform
from bldr.github import LatestInfo
from bldr.graph import PackageNode, dump_dot
from bldr.loader import FilesystemPackageLoader
from bldr.packages import Packages, load_packages
from bldr.update import latest

_GO_ARCHES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

_DESCRIPTION = """\
A tool to build and manage software via Pkgfile and pkg.yaml.

bldr loads the root Pkgfile and a set of pkg.yamls, processes them and
builds the dependency graph between build steps."""


def _default_platform() -> Platform:
    arch = _GO_ARCHES.get(platform.machine().lower(), platform.machine().lower())
    system = "linux" if sys.platform.startswith("linux") else sys.platform
    try:
        return get_platform(f"{system}/{arch}")
    except ValueError:
        return LINUX_AMD64


def _workers() -> int:
    import os

    return os.cpu_count() or 1


@dataclass
class _UpdateRow:
    file: str
    info: LatestInfo


def _write_table(rows: Iterable[Sequence[str]], stream: TextIO, padding: int = 3) -> None:
    """Write rows as space-aligned columns; the last column is not padded."""
    rows = [list(row) for row in rows]
    if not rows:
        return
    columns = max(len(row) for row in rows)
    widths = [
        max((len(row[col]) for row in rows if col < len(row) - 1), default=0)
        for col in range(columns)
    ]
    for row in rows:
        cells = [
            cell if col == len(row) - 1 else cell.ljust(widths[col] + padding)
            for col, cell in enumerate(row)
        ]
        stream.write("".join(cells) + "\n")


def check_updates(
    nodes: Iterable[PackageNode], show_all: bool, logger: logging.Logger
) -> None:
    """Check every source of ``nodes`` for updates and print a table to stdout."""
    work = [
        (node.pkg.file_name, source.url)
        for node in nodes
        for step in node.pkg.steps
        for source in step.sources
    ]

    def check(item: tuple[str, str]) -> Optional[_UpdateRow]:
        file_name, url = item
        try:
            return _UpdateRow(file=file_name, info=latest(url))
        except Exception as error:  # every failure is reported and skipped
            logger.info("%s", error)
            return None

    with ThreadPoolExecutor(max_workers=_workers()) as pool:
        results = [row for row in pool.map(check, work) if row is not None]

    results.sort(key=lambda row: row.file)

    table = [("File", "Update", "URL")]
    for row in results:
        if show_all or row.info.has_update:
            url = row.info.latest_url or row.info.base_url
            table.append((row.file, "true" if row.info.has_update else "false", url))

    _write_table(table, sys.stdout)
    sys.stdout.flush()


def validate_checksums(nodes: Iterable[PackageNode], logger: logging.Logger) -> None:
    """Download every source of ``nodes`` and verify its checksums.

    Raises ``MultiError`` listing every source that failed.
    """

    def check(node: PackageNode) -> list[ValueError]:
        errors = []
        pkg = node.pkg
        for step in pkg.steps:
            for source in step.sources:
                logger.info("downloading %s ...", source.url)
                try:
                    source.validate_checksums()
                except (ValueError, OSError, requests.RequestException) as error:
                    errors.append(ValueError(f"{pkg.name}: {error}"))
        return errors

    errors = MultiError()
    with ThreadPoolExecutor(max_workers=_workers()) as pool:
        for node_errors in pool.map(check, list(nodes)):
            for error in node_errors:
                errors.append(error)
    errors.raise_if_any()


def _command_logger(name: str, debug: bool) -> logging.Logger:
    logger = logging.getLogger(f"bldr.{name}")
    logger.setLevel(logging.INFO if debug else logging.CRITICAL + 1)
    return logger


def _load(args: argparse.Namespace, options: Options) -> Packages:
    loader = FilesystemPackageLoader(root=args.root, context=options.get_variables())
    return load_packages(loader)


def _run_graph(args: argparse.Namespace, options: Options) -> None:
    packages = _load(args, options)
    if args.target:
        nodes = packages.resolve(args.target).to_set()
    else:
        nodes = packages.to_set()
    dump_dot(nodes, sys.stdout)


def _run_update(args: argparse.Namespace, options: Options) -> None:
    if not args.dry:
        raise ValueError("Real update is not supported yet; pass `--dry` flag.")
    packages = _load(args, options)
    check_updates(packages.to_set(), args.all, _command_logger("update", args.debug))


def _run_validate(args: argparse.Namespace, options: Options) -> None:
    packages = _load(args, options)
    if args.checksums:
        validate_checksums(packages.to_set(), _command_logger("validate", args.debug))


def _parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--debug", action="store_true", default=argparse.SUPPRESS)
    common.add_argument("--root", default=argparse.SUPPRESS)

    parser = argparse.ArgumentParser(
        prog="bldr",
        description=_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--debug", action="store_true", default=False, help="Enable debug logging")
    parser.add_argument("--root", default=".", help="The path to a pkg root")
    commands = parser.add_subparsers(dest="command")

    graph = commands.add_parser(
        "graph",
        parents=[common],
        help="Graph dependencies between pkgs",
        description="Output a 'dot' formatted DAG of dependencies, "
        "e.g. bldr graph | dot -Tpng > graph.png",
    )
    graph.add_argument(
        "-t", "--target", default="",
        help="Target image to graph, if not set - graph all stages",
    )
    graph.set_defaults(run=_run_graph)

    update = commands.add_parser("update", parents=[common], help="Update pkgs")
    update.add_argument(
        "-a", "--all", action="store_true", help="List all packages, not only updated"
    )
    update.add_argument(
        "--dry", action="store_true",
        help="Dry run: check for updates, but not actually update pkgs",
    )
    update.set_defaults(run=_run_update)

    validate = commands.add_parser(
        "validate",
        parents=[common],
        help="Validate syntax of pkg.yaml files",
        description="Scan the directory tree for pkg.yaml files, "
        "load them and validate for errors.",
    )
    validate.add_argument(
        "--checksums", action=argparse.BooleanOptionalAction, default=True,
        help="validate checksums",
    )
    validate.set_defaults(run=_run_validate)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line tool and return its exit status."""
    parser = _parser()
    args = parser.parse_args(argv)

    if getattr(args, "run", None) is None:
        parser.print_help()
        return 0

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    default = _default_platform()
    options = Options(build_platform=default, target_platform=default)
    if getattr(args, "target", ""):
        options.target = args.target

    try:
        args.run(args, options)
    except (ValueError, OSError) as error:
        print(error, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())