"""Constants shared across the build tool."""

from typing import Final

DEFAULT_BASE_IMAGE: Final = "docker.io/alpine:3.11"
"""Base image for non-scratch builds."""

DEFAULT_DIR_MODE: Final = 0o755
"""UNIX file mode used when creating directories."""

DEFAULT_PATH: Final = "/bin:/usr/bin:/sbin:/usr/sbin"
"""Default value of the PATH environment variable."""

PKG_YAML: Final = "pkg.yaml"
"""File name of a package definition."""

PKGFILE: Final = "Pkgfile"
"""File name of the root build description."""

# Filled in when a release is built.
DEFAULT_REGISTRY = ""
DEFAULT_ORGANIZATION = ""
VERSION = ""