"""Test class Environment."""
from pydantic import ValidationError
import pytest

from infix_calculator.common.environment import Environment, normalize_name


def test_unseen_variables_are_zero():
    env = Environment()
    assert all(env.get(name) == 0 for name in "abcdefghijklmnopqrstuvwxyz")


def test_set_and_get():
    env = Environment()
    env.set("k", -12)
    assert env.get("k") == -12
    assert env.get("K") == -12


@pytest.mark.parametrize("name", ["", "ab", "1", "_", "é"])
def test_invalid_names_rejected(name):
    with pytest.raises(ValueError):
        normalize_name(name)
    with pytest.raises(ValueError):
        Environment().set(name, 1)


def test_update_is_all_or_nothing():
    env = Environment()
    with pytest.raises(ValueError):
        env.update({"a": 1, "bad": 2})
    assert env.snapshot() == {}


def test_snapshot_and_reset():
    env = Environment(bindings={"Z": 3, "b": 0, "a": 1})
    assert env.snapshot() == {"a": 1, "z": 3}
    env.reset()
    assert env.snapshot() == {}
    assert env.get("z") == 0


def test_constructor_validates_names():
    with pytest.raises(ValidationError):
        Environment(bindings={"xy": 1})


def test_sessions_are_independent():
    first, second = Environment(), Environment()
    first.set("a", 1)
    assert second.get("a") == 0
