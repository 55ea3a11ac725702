"""Build and target platforms, default environment and build options."""

from __future__ import annotations

from dataclasses import dataclass, field

from bldr.constants import DEFAULT_PATH
from bldr.variables import Variables


def default_variables() -> Variables:
    """Return default values for environment variables."""
    return Variables(
        {
            "CFLAGS": "-g0 -Os",
            "CXXFLAGS": "-g0 -Os",
            "LDFLAGS": "-s",
            "VENDOR": "talos",
            "SYSROOT": "/talos",
            "TOOLCHAIN": "/toolchain",
            "PATH": f"/toolchain/bin:{DEFAULT_PATH}",
        }
    )


@dataclass(frozen=True)
class Platform:
    """Describes a build or target platform."""

    id: str
    arch: str
    target: str
    build: str
    host: str

    def build_variables(self) -> Variables:
        """Return environment variables describing the build platform."""
        return Variables({"BUILD": self.build, "HOST": self.host})

    def target_variables(self) -> Variables:
        """Return environment variables describing the target platform."""
        return Variables({"ARCH": self.arch, "TARGET": self.target})

    def __str__(self) -> str:
        return self.id


LINUX_AMD64 = Platform(
    id="linux/amd64",
    arch="x86_64",
    target="x86_64-talos-linux-musl",
    build="x86_64-linux-musl",
    host="x86_64-linux-musl",
)

LINUX_ARM64 = Platform(
    id="linux/arm64",
    arch="aarch64",
    target="aarch64-talos-linux-musl",
    build="aarch64-linux-musl",
    host="aarch64-linux-musl",
)

LINUX_ARMV7 = Platform(
    id="linux/armv7",
    arch="armv7",
    target="armv7-talos-linux-musl",
    build="armv7-linux-musl",
    host="armv7-linux-musl",
)

PLATFORMS: dict[str, Platform] = {
    platform.id: platform for platform in (LINUX_AMD64, LINUX_ARM64, LINUX_ARMV7)
}


def get_platform(platform_id: str) -> Platform:
    """Look up a platform by its identifier such as ``linux/amd64``."""
    try:
        return PLATFORMS[platform_id]
    except KeyError:
        raise ValueError(f'platform "{platform_id}" is not defined') from None


@dataclass
class Options:
    """Options controlling a build."""

    build_platform: Platform = field(default=LINUX_AMD64)
    target_platform: Platform = field(default=LINUX_AMD64)
    target: str = ""
    common_prefix: str = ""

    def get_variables(self) -> Variables:
        """Return the full set of variables for these options."""
        return (
            default_variables()
            .merge(self.build_platform.build_variables())
            .merge(self.target_platform.target_variables())
        )