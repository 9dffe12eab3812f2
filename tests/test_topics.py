"""Tests for topic parsing and wildcard lookup keys."""

import pytest

from signalon import Topic, parse_concrete, parse_topic
from signalon.topics import WILDCARD_WILDCARD, is_valid_name


class TestParseTopic:
    @pytest.mark.parametrize(
        ("raw", "emitter", "event"),
        [
            ("red:save", "red", "save"),
            ("red:*", "red", "*"),
            ("*:save", "*", "save"),
            ("*:*", "*", "*"),
            ("save", "UI", "save"),
            ("*", "UI", "*"),
            ("my-emitter#1:on_save-2", "my-emitter#1", "on_save-2"),
        ],
    )
    def test_valid(self, raw, emitter, event):
        """Valid patterns parse into (emitter, event), default emitter injected."""
        assert parse_topic(raw) == Topic(emitter, event)

    @pytest.mark.parametrize(
        "raw",
        [
            "*red:save",
            "re*d:save",
            "red*:save",
            "red:*save",
            "red:sa*ve",
            "red:save*",
            ":save",
            "red:",
            "",
            "red:save:extra",
            "red save",
            "red:save\n",
        ],
    )
    def test_invalid(self, raw):
        """Partial or leading wildcards and missing parts are rejected."""
        assert parse_topic(raw) is None

    def test_non_string_rejected(self):
        """Non-string input is a validation failure, not an exception."""
        assert parse_topic(None) is None  # type: ignore[arg-type]
        assert parse_concrete(42) is None  # type: ignore[arg-type]

    def test_custom_default_emitter(self):
        """Bare event names take the supplied default emitter."""
        assert parse_topic("save", default_emitter="App") == Topic("App", "save")


class TestParseConcrete:
    def test_concrete_topic(self):
        assert parse_concrete("red:save") == Topic("red", "save")

    @pytest.mark.parametrize("raw", ["red:*", "*:save", "*:*", "save", ":save"])
    def test_wildcards_and_bare_names_rejected(self, raw):
        """Emission and definition topics must be fully qualified."""
        assert parse_concrete(raw) is None


class TestTopic:
    def test_lookup_keys_in_dispatch_order(self):
        """Exact, *:event, emitter:*, then *:*."""
        topic = Topic("red", "save")
        assert topic.lookup_keys() == ("red:save", "*:save", "red:*", WILDCARD_WILDCARD)

    def test_key_and_str(self):
        topic = Topic("red", "save")
        assert topic.key == "red:save"
        assert str(topic) == "red:save"

    def test_is_wildcard(self):
        assert not Topic("red", "save").is_wildcard
        assert Topic("red", "*").is_wildcard
        assert Topic("*", "save").is_wildcard

    def test_matches_position_wise(self):
        """A pattern matches when each part is equal or the pattern part is *."""
        assert Topic("red", "*").matches(Topic("red", "save"))
        assert Topic("*", "save").matches(Topic("blue", "save"))
        assert Topic("*", "*").matches(Topic("*", "save"))
        assert not Topic("red", "*").matches(Topic("blue", "save"))
        assert not Topic("red", "*").matches(Topic("*", "save"))

    def test_with_emitter(self):
        assert Topic("this", "send").with_emitter("Profile") == Topic("Profile", "send")


class TestNames:
    def test_is_valid_name(self):
        assert is_valid_name("red-1#x")
        assert not is_valid_name("*")
        assert not is_valid_name("red:save")
        assert not is_valid_name("")
