"""Loading ``Pkgfile`` and ``pkg.yaml`` files into package definitions."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Optional, Protocol

import yaml

from bldr.constants import PKG_YAML, PKGFILE
from bldr.dependency import MultiError
from bldr.pkg import Pkg, Pkgfile, load_pkg, load_pkgfile
from bldr.variables import Variables


@dataclass
class LoadResult:
    """What a package loader found."""

    pkgfile: Optional[Pkgfile] = None
    pkgs: list[Pkg] = field(default_factory=list)


class PackageLoader(Protocol):
    """Something that can fetch a collection of packages."""

    def load(self) -> LoadResult: ...


@dataclass
class FilesystemPackageLoader:
    """Loads packages by walking a directory tree."""

    root: str = "."
    context: Variables = field(default_factory=Variables)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("bldr.loader"))

    def load(self) -> LoadResult:
        """Load the ``Pkgfile`` and every ``pkg.yaml`` below the root.

        Raises ``MultiError`` if any package fails to load.
        """
        root = os.path.normpath(os.fspath(self.root) or ".")
        abs_root = os.path.abspath(root)
        pkgfile = self._load_pkgfile(root)

        pkgs: list[Pkg] = []
        errors = MultiError()
        for path in self._walk(root):
            try:
                pkg = self._load_pkg(path, abs_root)
            except (ValueError, OSError, yaml.YAMLError) as error:
                self.logger.warning('error loading "%s": %s', path, error)
                errors.append(ValueError(f'error loading "{path}": {error}'))
                continue
            self.logger.info('loaded pkg "%s" from "%s"', pkg.name, path)
            pkgs.append(pkg)

        errors.raise_if_any()
        return LoadResult(pkgfile=pkgfile, pkgs=pkgs)

    def _walk(self, path: str) -> Iterator[str]:
        try:
            info = os.lstat(path)
        except OSError as error:
            self.logger.warning('error walking "%s": %s', path, error)
            return

        name = os.path.basename(path)
        if stat.S_ISDIR(info.st_mode):
            if name != "." and name.startswith("."):
                return
            try:
                entries = sorted(os.listdir(path))
            except OSError as error:
                self.logger.warning('error walking "%s": %s', path, error)
                return
            for entry in entries:
                child = entry if path == "." else os.path.join(path, entry)
                yield from self._walk(child)
        elif name == PKG_YAML:
            yield path

    def _load_pkg(self, path: str, abs_root: str) -> Pkg:
        relative = os.path.relpath(os.path.abspath(path), abs_root)
        base_dir = os.path.dirname(relative) or "."
        with open(path, "rb") as stream:
            contents = stream.read()
        return load_pkg(base_dir, path, contents, self.context)

    def _load_pkgfile(self, root: str) -> Optional[Pkgfile]:
        path = PKGFILE if root == "." else os.path.join(root, PKGFILE)
        try:
            with open(path, "rb") as stream:
                contents = stream.read()
        except FileNotFoundError as error:
            self.logger.info('skipping "%s": %s', PKGFILE, error)
            return None

        try:
            pkgfile = load_pkgfile(contents)
        except (ValueError, yaml.YAMLError) as error:
            raise ValueError(f'error parsing "{PKGFILE}": {error}') from error

        self.context.update(pkgfile.vars)
        self.logger.info('loaded "%s"', PKGFILE)
        return pkgfile