"""Shared state of one dispatcher."""

from signalon.deferred import DeferredQueue
from signalon.definitions import DefinitionRegistry
from signalon.notifications import NotificationRegistry
from signalon.registry import SubscriptionRegistry


class DispatchContext:
    """Owns every table a dispatcher reads and writes.

    Attributes:
        notifications: Notifiers and detach-notifiers.
        subscriptions: Subscriber buckets per topic key.
        definitions: Custom-event definitions per topic key.
        running: Topic keys currently being dispatched (re-entrancy guard).
        deferred: Tasks run after the outermost dispatch completes.
    """

    def __init__(self) -> None:
        self.notifications = NotificationRegistry()
        self.subscriptions = SubscriptionRegistry(self.notifications)
        self.definitions = DefinitionRegistry()
        self.running: set[str] = set()
        self.deferred = DeferredQueue()

    def reset(self) -> None:
        """Return to the freshly constructed state."""
        self.subscriptions.clear()
        self.definitions.undefine_all()
        self.notifications.clear()
        self.running.clear()
        self.deferred.clear()
