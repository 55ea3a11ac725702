import hashlib
import logging

import pytest
import responses

from bldr.cli import check_updates, main, validate_checksums
from bldr.dependency import MultiError
from bldr.graph import PackageNode
from bldr.pkg import Pkg
from bldr.source import Source
from bldr.steps import Finalize, Step

RELEASES_URL = "https://api.github.com/repos/owner/repo/releases"
SOURCE_URL = "https://github.com/owner/repo/archive/refs/tags/v1.0.0.tar.gz"
NEW_URL = "https://github.com/owner/repo/archive/refs/tags/v1.1.0.tar.gz"


def _write_tree(root, packages):
    (root / "Pkgfile").write_text("format: v1alpha2\n")
    for directory, text in packages.items():
        (root / directory).mkdir()
        (root / directory / "pkg.yaml").write_text(text)


def _node(name, url, file_name=None):
    pkg = Pkg(
        name=name,
        file_name=file_name or f"{name}/pkg.yaml",
        steps=[Step(sources=[Source(url=url)])],
        finalize=[Finalize(from_="/", to="/")],
    )
    return PackageNode(pkg=pkg, name=name)


@pytest.fixture(autouse=True)
def _no_token(monkeypatch):
    monkeypatch.delenv("BLDR_GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_graph_with_target(tmp_path, capsys):
    _write_tree(
        tmp_path,
        {"a": "name: a\ndependencies:\n  - stage: b\n", "b": "name: b\n", "c": "name: c\n"},
    )
    assert main(["--root", str(tmp_path), "graph", "--target", "a"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("digraph {")
    assert '"a"' in out
    assert '"b"' in out
    assert '"c"' not in out
    assert "->" in out


def test_graph_all_packages(tmp_path, capsys):
    _write_tree(tmp_path, {"a": "name: a\n", "c": "name: c\n"})
    assert main(["graph", "--root", str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert '"a"' in out
    assert '"c"' in out


def test_graph_unknown_target(tmp_path, capsys):
    _write_tree(tmp_path, {"a": "name: a\n"})
    assert main(["--root", str(tmp_path), "graph", "-t", "missing"]) == 1
    assert 'package "missing" not defined' in capsys.readouterr().err


def test_update_requires_dry(tmp_path, capsys):
    _write_tree(tmp_path, {"a": "name: a\n"})
    assert main(["--root", str(tmp_path), "update"]) == 1
    assert "--dry" in capsys.readouterr().err


def test_validate_without_checksums(tmp_path):
    _write_tree(tmp_path, {"a": "name: a\n"})
    assert main(["--root", str(tmp_path), "validate", "--no-checksums"]) == 0


def test_validate_reports_invalid_package(tmp_path, capsys):
    _write_tree(tmp_path, {"a": "install:\n  - bash\n"})
    assert main(["--root", str(tmp_path), "validate", "--no-checksums"]) == 1
    assert "package name can't be empty" in capsys.readouterr().err


def test_check_updates_reports_update(mocked, capsys):
    mocked.add(
        responses.GET,
        RELEASES_URL,
        json=[{"tag_name": "v1.1.0", "created_at": "2021-01-01T00:00:00Z", "assets": []}],
    )
    check_updates([_node("x", SOURCE_URL)], False, logging.getLogger("test"))
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split() == ["File", "Update", "URL"]
    assert lines[1].split() == ["x/pkg.yaml", "true", NEW_URL]
    assert lines[0].index("URL") == lines[1].index(NEW_URL)


def test_check_updates_hides_current_unless_all(mocked, capsys):
    release = {
        "tag_name": "v1.0.0",
        "created_at": "2021-01-01T00:00:00Z",
        "assets": [],
    }
    mocked.add(responses.GET, RELEASES_URL, json=[release])
    mocked.add(responses.GET, RELEASES_URL, json=[release])
    node = _node("x", SOURCE_URL)

    check_updates([node], False, logging.getLogger("test"))
    assert len(capsys.readouterr().out.splitlines()) == 1

    check_updates([node], True, logging.getLogger("test"))
    lines = capsys.readouterr().out.splitlines()
    assert lines[1].split() == ["x/pkg.yaml", "false", SOURCE_URL]


def test_check_updates_logs_unhandled_host(capsys, caplog):
    logger = logging.getLogger("test.update")
    with caplog.at_level(logging.INFO, logger="test.update"):
        check_updates(
            [_node("x", "https://gitlab.com/o/r/-/archive/v1.0.0/r-v1.0.0.tar.gz")],
            True,
            logger,
        )
    assert capsys.readouterr().out.splitlines()[1:] == []
    assert 'unhandled host "gitlab.com"' in caplog.text


def test_validate_checksums_success(mocked, caplog):
    url = "https://example.com/data.tar.gz"
    body = b"data"
    mocked.add(responses.GET, url, body=body)
    node = _node("pkg", url)
    node.pkg.steps[0].sources[0].sha256 = hashlib.sha256(body).hexdigest()
    node.pkg.steps[0].sources[0].sha512 = hashlib.sha512(body).hexdigest()
    logger = logging.getLogger("test.validate")
    with caplog.at_level(logging.INFO, logger="test.validate"):
        validate_checksums([node], logger)
    assert f"downloading {url} ..." in caplog.text


def test_validate_checksums_mismatch(mocked):
    url = "https://example.com/data.tar.gz"
    mocked.add(responses.GET, url, body=b"data")
    node = _node("pkg", url)
    node.pkg.steps[0].sources[0].sha256 = "0" * 64
    node.pkg.steps[0].sources[0].sha512 = "1" * 128
    with pytest.raises(MultiError) as excinfo:
        validate_checksums([node], logging.getLogger("test"))
    assert len(excinfo.value.errors) == 1
    message = str(excinfo.value.errors[0])
    assert message.startswith("pkg: ")
    assert "source.sha256 does not match" in message
    assert "source.sha512 does not match" in message