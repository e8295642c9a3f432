"""Tests for the exception hierarchy."""

import pytest

from cmdclient.exceptions import (
    CommandClientError,
    CommandNotFoundError,
    ConfigurationError,
    DuplicateKeyError,
    ErrorCategory,
    InvalidIndexError,
    RegistryError,
)


def test_base_error_str_includes_module_and_context():
    err = CommandClientError("boom", module="router", command="ping")
    assert str(err) == "boom [module=router] (command=ping)"
    assert err.context == {"command": "ping"}
    assert err.category is ErrorCategory.PERMANENT


def test_base_error_without_message_uses_class_name():
    assert str(CommandClientError()) == "CommandClientError"


def test_repr():
    err = ConfigurationError("bad prefix", setting_name="prefix")
    assert repr(err) == (
        "ConfigurationError('bad prefix', category='infrastructure', module='config')"
    )
    assert err.setting_name == "prefix"


@pytest.mark.parametrize(
    "err, builtin",
    [
        (InvalidIndexError(4, 2), IndexError),
        (DuplicateKeyError("ping"), ValueError),
        (CommandNotFoundError("ping"), LookupError),
    ],
)
def test_registry_errors_are_also_builtin_errors(err, builtin):
    assert isinstance(err, RegistryError)
    assert isinstance(err, CommandClientError)
    assert isinstance(err, builtin)
    assert err.module == "registry"


def test_invalid_index_message():
    err = InvalidIndexError(4, 2, kind="command")
    assert err.message == "Index specified is invalid: [4/2]"
    assert "kind=command" in str(err)


def test_duplicate_key_message():
    err = DuplicateKeyError("ping")
    assert err.key == "ping"
    assert '"ping"' in err.message
