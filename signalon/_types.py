"""Shared type definitions for signalon.

All type aliases are declared with ``typing.TypeAlias``.
"""

from collections.abc import Callable
from typing import Any, TypeAlias

from signalon.events import CustomEvent

Callback: TypeAlias = Callable[[CustomEvent], Any]
"""Subscriber callback; receives the event object, return value is ignored."""

Filter: TypeAlias = Callable[[CustomEvent], Any] | str
"""Subscriber filter.

A callable is evaluated with the event and the subscriber is skipped when it
returns a falsy value.  A string (e.g. a selector) is carried on the record
for pre-processors supplied through :meth:`Dispatcher.dispatch`.
"""

DefaultFn: TypeAlias = Callable[[CustomEvent], Any]
"""Default or prevented action of a definition; its result becomes
``event.return_value``."""

PreProcessor: TypeAlias = Callable[[Any, CustomEvent], bool]
"""Hook run ahead of each override subscriber; returning True stops the pass."""

NotifyCallback: TypeAlias = Callable[[str, Any], Any]
"""Notifier callback, called with ``(topic, subscriber_record)``."""

DetachNotifyCallback: TypeAlias = Callable[[str], Any]
"""Detach-notifier callback, called with the concrete topic."""

Task: TypeAlias = Callable[[], Any]
"""Deferred zero-argument task."""
