import pytest

from bldr.dependency import Dependency, MultiError, validate_dependencies


def test_internal_and_paths():
    dep = Dependency(stage="base")
    assert dep.is_internal() is True
    assert dep.src() == "/"
    assert dep.dest() == "/"
    assert Dependency(image="alpine", to="/rootfs").dest() == "/rootfs"
    assert Dependency(image="alpine").is_internal() is False


def test_validate_both_set():
    with pytest.raises(ValueError, match="both image & stage"):
        Dependency(image="a", stage="b").validate()


def test_validate_none_set():
    with pytest.raises(ValueError, match="either image or stage"):
        Dependency().validate()


def test_validate_dependencies_collects():
    with pytest.raises(MultiError) as info:
        validate_dependencies([Dependency(), Dependency(stage="ok"), Dependency(image="a", stage="b")])
    assert len(info.value.errors) == 2
    assert str(info.value).startswith("2 errors occurred:\n\t* ")


def test_multierror_flattens_and_ignores_none():
    inner = MultiError([ValueError("x"), None])
    outer = MultiError().append(inner).append(ValueError("y"))
    assert [str(e) for e in outer] == ["x", "y"]
    assert str(inner) == "1 error occurred:\n\t* x\n\n"


def test_raise_if_any_empty_is_silent():
    errors = MultiError()
    errors.raise_if_any()
    assert errors.errors == []