"""Tests for modserver.__init__ — every public name resolves lazily."""

import pytest

import modserver


@pytest.mark.parametrize("name", modserver.__all__)
def test_all_names_resolve(name: str) -> None:
    obj = getattr(modserver, name)
    assert obj is not None, f"modserver.{name} resolved to None"


def test_unknown_name_raises() -> None:
    with pytest.raises(AttributeError, match="no attribute 'Nope'"):
        modserver.Nope  # noqa: B018
