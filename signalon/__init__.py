"""signalon - Synchronous in-process publish/subscribe for Python.

This package provides ``emitter:event`` topics with wildcard subscriptions,
before/default/after phases and per-event control (halt, prevent, silence).
"""

__version__ = "0.1.0"

from loguru import logger

# Disable all signalon logging by default.  Users opt in with:
#     from loguru import logger
#     logger.enable("signalon")
logger.disable("signalon")

from signalon.aware import Emitter, Listener
from signalon.base_dispatcher import BaseDispatcher
from signalon.context import DispatchContext
from signalon.definitions import Definition, DefinitionBuilder
from signalon.dispatcher import Dispatcher
from signalon.events import CustomEvent, EventStatus
from signalon.exceptions import (
    EmitterNameError,
    ReentrantEmitError,
    SettingsError,
    SignalError,
    TopicError,
)
from signalon.handles import Handle, MultiHandle
from signalon.registry import ANY_OWNER, SubscriberRecord
from signalon.settings import DispatcherSettings, load_settings
from signalon.topics import Topic, parse_concrete, parse_topic

# Module-level default dispatcher instance
default_dispatcher = Dispatcher()

__all__ = [
    # Version
    "__version__",
    # Event classes
    "CustomEvent",
    "EventStatus",
    "Definition",
    "DefinitionBuilder",
    # Dispatcher classes
    "BaseDispatcher",
    "Dispatcher",
    "DispatchContext",
    "default_dispatcher",
    # Subscriptions
    "ANY_OWNER",
    "Handle",
    "MultiHandle",
    "SubscriberRecord",
    "Listener",
    "Emitter",
    # Topics
    "Topic",
    "parse_topic",
    "parse_concrete",
    # Settings
    "DispatcherSettings",
    "load_settings",
    # Exception classes
    "SignalError",
    "TopicError",
    "EmitterNameError",
    "ReentrantEmitError",
    "SettingsError",
]
