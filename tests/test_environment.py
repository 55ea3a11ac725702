import pytest

from bldr.constants import DEFAULT_PATH
from bldr.environment import (
    LINUX_AMD64,
    LINUX_ARM64,
    PLATFORMS,
    Options,
    default_variables,
    get_platform,
)


def test_platforms_registry_is_keyed_by_id():
    assert set(PLATFORMS) == {"linux/amd64", "linux/arm64", "linux/armv7"}
    for platform_id, platform in PLATFORMS.items():
        assert platform.id == platform_id
        assert str(platform) == platform_id


def test_get_platform_known():
    platform = get_platform("linux/arm64")
    assert platform is LINUX_ARM64
    assert platform.arch == "aarch64"
    assert platform.target == "aarch64-talos-linux-musl"


def test_get_platform_unknown_raises():
    with pytest.raises(ValueError, match='platform "windows/x86" is not defined'):
        get_platform("windows/x86")


def test_build_and_target_variables():
    assert LINUX_AMD64.build_variables() == {
        "BUILD": LINUX_AMD64.build,
        "HOST": LINUX_AMD64.host,
    }
    assert LINUX_AMD64.target_variables() == {
        "ARCH": "x86_64",
        "TARGET": "x86_64-talos-linux-musl",
    }


def test_default_variables_contents():
    variables = default_variables()
    assert variables["CFLAGS"] == "-g0 -Os"
    assert variables["VENDOR"] == "talos"
    assert variables["PATH"].startswith(variables["TOOLCHAIN"])
    assert variables["PATH"].endswith(DEFAULT_PATH)


def test_default_variables_is_fresh_each_call():
    first = default_variables()
    first["CFLAGS"] = "changed"
    assert default_variables()["CFLAGS"] == "-g0 -Os"


def test_options_defaults_to_amd64():
    options = Options()
    assert options.build_platform is LINUX_AMD64
    assert options.target_platform is LINUX_AMD64
    assert options.target == ""


def test_options_get_variables_mixes_build_and_target():
    options = Options(build_platform=LINUX_AMD64, target_platform=LINUX_ARM64)
    variables = options.get_variables()
    assert variables["BUILD"] == LINUX_AMD64.build
    assert variables["HOST"] == LINUX_AMD64.host
    assert variables["ARCH"] == LINUX_ARM64.arch
    assert variables["TARGET"] == LINUX_ARM64.target
    assert set(default_variables()) <= set(variables)