import pytest
import yaml

from bldr.v1alpha1 import Options, Variant, load_pkg

FULL_PKG = """\
name: musl
install:
  - gcc
  - make
dependencies:
  - image: docker.io/autonomy/toolchain:latest
    to: /toolchain
steps:
  - prepare: ./configure
    build: make
    sources:
      - url: https://example.com/musl-1.1.24.tar.gz
        destination: musl.tar.gz
        sha256: abc
        sha512: def
finalize:
  - from: /rootfs
    to: /
variant: scratch
shell: /bin/bash
"""


def _write(tmp_path, text):
    path = tmp_path / "pkg.yaml"
    path.write_text(text)
    return path


def test_load_full_pkg(tmp_path):
    options = Options(registry="example.com")
    pkg = load_pkg(_write(tmp_path, FULL_PKG), options)

    assert pkg.name == "musl"
    assert pkg.install == ["gcc", "make"]
    assert pkg.dependencies[0].image == "docker.io/autonomy/toolchain:latest"
    assert pkg.dependencies[0].to == "/toolchain"
    step = pkg.steps[0]
    assert step.prepare == "./configure"
    assert step.build == "make"
    assert step.install is None
    assert step.test is None
    assert step.sources[0].destination == "musl.tar.gz"
    assert step.sources[0].sha512 == "def"
    assert pkg.finalize[0].from_ == "/rootfs"
    assert pkg.finalize[0].to == "/"
    assert pkg.variant is Variant.SCRATCH
    assert pkg.shell == "/bin/bash"
    assert pkg.options is options


def test_defaults_for_minimal_pkg(tmp_path):
    pkg = load_pkg(_write(tmp_path, "name: tiny\n"), None)
    assert pkg.name == "tiny"
    assert pkg.shell == "/bin/sh"
    assert pkg.variant is Variant.ALPINE
    assert pkg.steps == []
    assert pkg.options is None


def test_empty_file_gives_defaults(tmp_path):
    pkg = load_pkg(_write(tmp_path, ""), None)
    assert pkg.name == ""
    assert pkg.shell == "/bin/sh"


def test_unknown_variant_raises(tmp_path):
    with pytest.raises(ValueError, match='unknown variant "debian"'):
        load_pkg(_write(tmp_path, "name: x\nvariant: debian\n"), None)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_pkg(tmp_path / "absent.yaml", None)


def test_variant_string_round_trip():
    for variant in Variant:
        assert Variant.from_string(str(variant)) is variant
    assert str(Variant.ALPINE) == "alpine"
    assert str(Variant.SCRATCH) == "scratch"


def test_invalid_yaml_raises(tmp_path):
    with pytest.raises((yaml.YAMLError, ValueError), match="flow sequence"):
        load_pkg(_write(tmp_path, "name: [unclosed\n"), None)


def test_non_mapping_document_raises(tmp_path):
    with pytest.raises(ValueError):
        load_pkg(_write(tmp_path, "- a\n- b\n"), None)