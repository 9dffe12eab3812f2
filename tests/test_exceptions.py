"""Tests for signalon exception hierarchy."""

import pytest

from signalon import (
    EmitterNameError,
    ReentrantEmitError,
    SettingsError,
    SignalError,
    TopicError,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        ("error", "builtin"),
        [
            (TopicError, ValueError),
            (EmitterNameError, ValueError),
            (SettingsError, ValueError),
            (ReentrantEmitError, RuntimeError),
        ],
    )
    def test_inheritance(self, error, builtin):
        """Every error is a SignalError and a matching builtin."""
        assert issubclass(error, SignalError)
        assert issubclass(error, builtin)

    def test_catch_as_base(self):
        with pytest.raises(SignalError, match="bad topic"):
            raise TopicError("bad topic")
