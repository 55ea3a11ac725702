# bldr

`bldr` works with trees of `pkg.yaml` build definitions rooted at a `Pkgfile`.
It loads every package in the tree, renders the templates in them with the
build variables, validates them, resolves the dependencies between them,
draws the dependency graph, downloads sources to verify their checksums and
checks GitHub-hosted sources for newer releases.

## Installation

```
pip install .
```

For the tests: `pip install .[test]` and run `pytest`.

## Layout of a package tree

The root of the tree may hold a `Pkgfile`; its `format` must be `v1alpha2`.
Its `vars` are added to the template variables, its `labels` are available
through `Packages.image_labels()`.

```yaml
format: v1alpha2
vars:
  VERSION: "1.2.7"
labels:
  org.example.title: toolchain
```

Each package lives in its own directory with a `pkg.yaml`:

```yaml
name: musl-fts
variant: alpine
dependencies:
  - stage: base
  - image: docker.io/library/busybox:latest
    to: /busybox
    runtime: true
steps:
  - sources:
      - url: https://example.com/musl-fts-{{ .VERSION }}.tar.gz
        destination: musl-fts.tar.gz
        sha256: <64 hex characters>
        sha512: <128 hex characters>
    build:
      - make
    install:
      - make install DESTDIR=/rootfs
finalize:
  - from: /rootfs
    to: /
```

`variant` is `alpine` (the default) or `scratch`. A dependency names either an
`image` or a `stage`, never both. A package with steps must have `finalize`
entries. Every source needs a `url`, a `destination`, a 64-character `sha256`
and a 128-character `sha512`. Directories whose names start with a dot are
skipped while walking the tree.

### Templates

Before it is parsed as YAML, a `pkg.yaml` is expanded with the build
variables: the defaults (`CFLAGS`, `CXXFLAGS`, `LDFLAGS`, `VENDOR`, `SYSROOT`,
`TOOLCHAIN`, `PATH`), the platform variables (`BUILD`, `HOST`, `ARCH`,
`TARGET`) and the `Pkgfile` `vars`. Actions look like `{{ .NAME }}`; they
may use string and number literals, pipes (`{{ .NAME | upper }}`), comments
(`{{/* ... */}}`), the trim markers `{{- ` and ` -}}`, and the functions
`lower`, `upper`, `trim`, `quote`, `squote`, `default`, `replace`,
`trimPrefix` and `trimSuffix`. Control actions such as `if` and `range` are
not supported and raise `bldr.template.TemplateError`.

## Command line

Global options: `--root DIR` (the tree to load, default `.`) and `--debug`
(show the log output of `update` and `validate`). They may be given before or
after the command.

```
bldr validate                 # load and check every pkg.yaml, then download sources and check checksums
bldr validate --no-checksums  # only load and check the pkg.yaml files
bldr graph                    # dot graph of all packages
bldr graph --target musl-fts  # dot graph of a target and its dependencies
bldr graph | dot -Tpng > graph.png
bldr update --dry             # list sources that have newer releases on GitHub
bldr update --dry --all       # list every source
```

Errors are printed to standard error and the exit status is 1.

`update` only checks; without `--dry` it stops with an error. It prints a
table with the columns `File`, `Update` and `URL`; the URL is the newest
download when it is known, otherwise the releases page. Only `github.com`
sources can be checked; other sources are skipped (the reason is logged with
`--debug`). Set `BLDR_GITHUB_TOKEN` or `GITHUB_TOKEN` to avoid GitHub rate
limits.

## Library use

```python
import sys

from bldr.environment import Options
from bldr.graph import dump_dot
from bldr.loader import FilesystemPackageLoader
from bldr.packages import load_packages

options = Options()
loader = FilesystemPackageLoader(root="pkgs", context=options.get_variables())
packages = load_packages(loader)
graph = packages.resolve("musl-fts")
dump_dot(graph.to_set(), sys.stdout)
```

Other pieces:

- `bldr.pkg.load_pkg` and `bldr.pkg.load_pkgfile` parse single documents.
- `bldr.environment.get_platform` looks up `linux/amd64`, `linux/arm64` or
  `linux/armv7`.
- `bldr.version.extract_version` picks the semantic version out of a file
  name or URL, such as `1.16.0` from `automake-1.16.tar.gz`.
- `bldr.update.latest` reports whether a GitHub-hosted source has a newer
  release or tag, as a `bldr.github.LatestInfo`.
- `bldr.source.Source.validate_checksums` downloads a source and compares its
  SHA-256 and SHA-512.
- `bldr.v1alpha1.load_pkg` reads the older `pkg.yaml` format and
  `bldr.upgrade.from_v1alpha1` converts such a package to the current one.

Validation problems are raised together as `bldr.dependency.MultiError`, a
`ValueError` whose `errors` attribute lists each of them.

## What it does not do

`bldr` does not build anything. It does not turn the package graph into
container build instructions, does not act as a frontend for a container
build service, and produces no images. `update` does not rewrite `pkg.yaml`
files.