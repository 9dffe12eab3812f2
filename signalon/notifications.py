"""Notifiers fired when a topic gains or loses a subscriber.

Notifiers let an emitter defer setup work (defining events, opening
resources) until somebody actually subscribes, and tear it down again when
the subscribers go away.
"""

from dataclasses import dataclass
from typing import Any

from loguru import logger

from signalon._types import DetachNotifyCallback, NotifyCallback
from signalon.topics import WILDCARD_WILDCARD, Topic
from signalon.utils import as_list, callable_name

log = logger.bind(source=__name__)


@dataclass(frozen=True)
class Notifier:
    """Stored notifier.

    Attributes:
        callback: Function called when the notifier fires.
        owner: Party that requested the notification.
        once: Remove the notifier after it fired once.
    """

    callback: Any
    owner: Any = None
    once: bool = False


class NotificationRegistry:
    """Notifier and detach-notifier tables keyed by topic string.

    One record per topic string; registering again overwrites.
    """

    def __init__(self) -> None:
        self._notifiers: dict[str, Notifier] = {}
        self._detach_notifiers: dict[str, Notifier] = {}

    @property
    def notifiers(self) -> dict[str, Notifier]:
        return self._notifiers

    @property
    def detach_notifiers(self) -> dict[str, Notifier]:
        return self._detach_notifiers

    def notify(
        self,
        topics: str | list[str],
        callback: NotifyCallback,
        owner: Any = None,
        once: bool = False,
    ) -> None:
        """Store a subscribe-notifier for every topic in *topics*."""
        for topic in as_list(topics):
            self._notifiers[topic] = Notifier(callback, owner, once)

    def notify_detach(
        self,
        topics: str | list[str],
        callback: DetachNotifyCallback,
        owner: Any = None,
        once: bool = False,
    ) -> None:
        """Store a detach-notifier for every topic in *topics*."""
        for topic in as_list(topics):
            self._detach_notifiers[topic] = Notifier(callback, owner, once)

    def un_notify(self, topic: str) -> None:
        self._notifiers.pop(topic, None)

    def un_notify_detach(self, topic: str) -> None:
        self._detach_notifiers.pop(topic, None)

    def fire_subscribed(self, topic: Topic, record: Any) -> None:
        """Run notifiers matching a new subscription on a concrete topic.

        Checked keys, each at most once: the topic itself, ``emitter:*``,
        ``*:event`` and ``*:*``.

        Args:
            topic: Concrete topic that gained a subscriber.
            record: The new subscriber record, passed to the notifier.
        """
        key = topic.key
        for lookup in dict.fromkeys(
            (key, topic.any_event_key, topic.any_emitter_key, WILDCARD_WILDCARD)
        ):
            self._fire(self._notifiers, lookup, key, record)

    def fire_detached(self, topic: Topic) -> None:
        """Run detach-notifiers after a concrete topic lost subscribers.

        Only the topic itself and its ``emitter:*`` variant are checked;
        ``*:event`` and ``*:*`` detach-notifiers are never fired.
        """
        key = topic.key
        for lookup in dict.fromkeys((key, topic.any_event_key)):
            self._fire(self._detach_notifiers, lookup, key)

    def clear(self) -> None:
        self._notifiers.clear()
        self._detach_notifiers.clear()

    @staticmethod
    def _fire(table: dict[str, Notifier], lookup: str, key: str, *args: Any) -> None:
        notifier = table.get(lookup)
        if notifier is None:
            return
        if notifier.once:
            del table[lookup]
        log.debug(
            "Notifier {} on '{}' fired for '{}'",
            callable_name(notifier.callback),
            lookup,
            key,
        )
        notifier.callback(key, *args)
