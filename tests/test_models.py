"""Tests for command descriptors and event helpers."""

from dataclasses import FrozenInstanceError
from unittest.mock import MagicMock

import pytest

from cmdclient.events import (
    ChannelType,
    MessageEvent,
    SlashCommandEvent,
    has_option,
    opt_bool,
    opt_float,
    opt_int,
    opt_string,
)
from cmdclient.models import Category, Command, SlashCommand


class TestCommand:

    def test_keys_are_lowercased_name_and_aliases(self):
        command = Command(name="Ping", handler=MagicMock(), aliases=["P", "pong"])
        assert command.aliases == frozenset({"P", "pong"})
        assert command.keys == frozenset({"ping", "p", "pong"})

    def test_single_string_alias(self):
        command = Command(name="ping", handler=MagicMock(), aliases="p")
        assert command.aliases == frozenset({"p"})

    def test_is_immutable(self):
        command = Command(name="ping", handler=MagicMock())
        with pytest.raises(FrozenInstanceError):
            command.name = "pong"

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            Command(name="  ", handler=MagicMock())
        with pytest.raises(ValueError):
            SlashCommand(name="", handler=MagicMock())

    def test_run_calls_handler(self):
        handler = MagicMock(return_value="ok")
        command = Command(
            name="ping",
            handler=handler,
            category=Category("Fun"),
            arguments="[count]",
        )
        assert command.run("ctx") == "ok"
        handler.assert_called_once_with("ctx")
        assert command.category.name == "Fun"
        assert command.hidden is False
        assert command.owner_command is False

    def test_slash_run_passes_client(self):
        handler = MagicMock()
        SlashCommand(name="ban", handler=handler).run("event", "client")
        handler.assert_called_once_with("event", "client")

    def test_equality_ignores_handler(self):
        assert Command(name="a", handler=MagicMock()) == Command(name="a", handler=MagicMock())


class TestEvents:

    def test_message_defaults(self):
        event = MessageEvent(message_id="1", author_id="2", content="hi")
        assert event.channel_type is ChannelType.GUILD
        assert event.can_talk is True
        assert event.author_is_bot is False
        assert event.is_from_type(ChannelType.GUILD)
        assert not event.is_from_type(ChannelType.PRIVATE)


class TestOptionHelpers:

    def _event(self, **options):
        return SlashCommandEvent(name="cmd", user_id="1", options=options)

    def test_present_options(self):
        event = self._event(text="hi", flag="true", count="3", ratio=0.5)
        assert has_option(event, "text")
        assert opt_string(event, "text") == "hi"
        assert opt_bool(event, "flag") is True
        assert opt_int(event, "count") == 3
        assert opt_float(event, "ratio") == 0.5

    def test_missing_and_null_options_use_defaults(self):
        event = self._event(nothing=None)
        assert not has_option(event, "nothing")
        assert opt_string(event, "missing", "dflt") == "dflt"
        assert opt_bool(event, "nothing", True) is True
        assert opt_int(event, "missing", 7) == 7
        assert opt_float(event, "missing", 1.5) == 1.5

    def test_non_numeric_int_raises(self):
        with pytest.raises(ValueError):
            opt_int(self._event(count="many"), "count")
