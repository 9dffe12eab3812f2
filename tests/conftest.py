"""Shared test fixtures for all signalon tests."""

import pytest
from loguru import logger

from signalon import Dispatcher, Emitter


class Owner:
    """Plain listening party without an emitter name."""

    def __init__(self, name: str = "owner"):
        self.name = name

    def __repr__(self) -> str:
        return f"<Owner {self.name}>"


class Profile(Emitter):
    """Emitter that listens to its own ``send`` events."""

    def __init__(self, name: str, dispatcher: Dispatcher, calls: list[str]):
        super().__init__("PersonalProfile", dispatcher)
        self.name = name
        self.calls = calls
        self.after("this:send", self.on_send)

    def on_send(self, event) -> None:
        self.calls.append(self.name)


@pytest.fixture
def dispatcher() -> Dispatcher:
    """Fresh dispatcher with its own context."""
    return Dispatcher()


@pytest.fixture
def log_messages():
    """Capture signalon log records as (level, message) tuples."""
    messages: list[tuple[str, str]] = []
    logger.enable("signalon")
    handler_id = logger.add(
        lambda message: messages.append(
            (message.record["level"].name, message.record["message"])
        ),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)
    logger.disable("signalon")


def levels(messages: list[tuple[str, str]], level: str) -> list[str]:
    """Messages logged at *level*."""
    return [text for lvl, text in messages if lvl == level]
