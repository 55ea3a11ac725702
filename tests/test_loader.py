import pytest

from bldr.dependency import MultiError
from bldr.loader import FilesystemPackageLoader, LoadResult
from bldr.variables import Variables


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def tree(tmp_path):
    _write(tmp_path / "Pkgfile", "format: v1alpha2\nvars:\n  NAME: a\nlabels:\n  team: core\n")
    _write(tmp_path / "a" / "pkg.yaml", "name: {{ .NAME }}\n")
    _write(tmp_path / "b" / "pkg.yaml", "name: b\n")
    _write(tmp_path / "pkg.yaml", "name: root\n")
    _write(tmp_path / ".hidden" / "pkg.yaml", "name: hidden\n")
    _write(tmp_path / "a" / "notes.txt", "not a package\n")
    return tmp_path


def test_loads_packages_in_lexical_order_skipping_hidden(tree):
    result = FilesystemPackageLoader(root=str(tree)).load()
    assert isinstance(result, LoadResult)
    assert [pkg.name for pkg in result.pkgs] == ["a", "b", "root"]


def test_base_dir_and_file_name(tree):
    result = FilesystemPackageLoader(root=str(tree)).load()
    by_name = {pkg.name: pkg for pkg in result.pkgs}
    assert by_name["a"].base_dir == "a"
    assert by_name["root"].base_dir == "."
    assert by_name["b"].file_name == str(tree / "b" / "pkg.yaml")


def test_pkgfile_vars_merged_into_context(tree):
    context = Variables({"ARCH": "x86_64"})
    result = FilesystemPackageLoader(root=str(tree), context=context).load()
    assert result.pkgfile.labels == {"team": "core"}
    assert context["NAME"] == "a"
    assert context["ARCH"] == "x86_64"


def test_missing_pkgfile_is_skipped(tmp_path):
    _write(tmp_path / "x" / "pkg.yaml", "name: x\n")
    result = FilesystemPackageLoader(root=str(tmp_path)).load()
    assert result.pkgfile is None
    assert [pkg.name for pkg in result.pkgs] == ["x"]


def test_invalid_pkgfile_format_raises(tmp_path):
    _write(tmp_path / "Pkgfile", "format: v1alpha1\n")
    with pytest.raises(ValueError, match='error parsing "Pkgfile"'):
        FilesystemPackageLoader(root=str(tmp_path)).load()


def test_broken_package_reports_error(tmp_path):
    _write(tmp_path / "good" / "pkg.yaml", "name: good\n")
    _write(tmp_path / "bad" / "pkg.yaml", "name: ''\n")
    with pytest.raises(MultiError) as info:
        FilesystemPackageLoader(root=str(tmp_path)).load()
    assert len(info.value.errors) == 1
    message = str(info.value.errors[0])
    assert message.startswith('error loading "')
    assert "package name can't be empty" in message


def test_empty_root_means_current_directory(tree, monkeypatch):
    monkeypatch.chdir(tree)
    result = FilesystemPackageLoader(root="").load()
    by_name = {pkg.name: pkg for pkg in result.pkgs}
    assert sorted(by_name) == ["a", "b", "root"]
    assert by_name["a"].file_name == "a/pkg.yaml"