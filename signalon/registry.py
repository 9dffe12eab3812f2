"""Registry for subscriber management.

This module provides SubscriptionRegistry for storing subscriber records per
topic key, split into a ``before`` and an ``after`` sequence.  Keys are
either concrete topics (``red:save``) or wildcard topics (``red:*``,
``*:save``, ``*:*``); wildcard resolution happens at dispatch time by
looking up the four keys derived from the emitted topic.
"""

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from signalon._types import Callback, Filter
from signalon.notifications import NotificationRegistry
from signalon.topics import Topic
from signalon.utils import callable_name

log = logger.bind(source=__name__)


class _AnyOwner:
    def __repr__(self) -> str:
        return "ANY_OWNER"


ANY_OWNER: Any = _AnyOwner()
"""Owner selector matching every subscriber record."""


@dataclass(eq=False)
class SubscriberRecord:
    """One subscription.

    Records compare by identity, so the same callback registered twice
    yields two independent records.

    Attributes:
        owner: Listening party; the dispatcher itself when none was given.
        callback: Function invoked with the event.
        filter: Optional predicate (or selector string for pre-processors).
        self_only: Registered through ``this:``; fires only when the event
            target is the owner itself.
    """

    owner: Any
    callback: Callback
    filter: Filter | None = None
    self_only: bool = False


@dataclass(eq=False)
class Bucket:
    """Subscriber sequences of one topic key."""

    topic: Topic
    before: list[SubscriberRecord] = field(default_factory=list)
    after: list[SubscriberRecord] = field(default_factory=list)

    def phase(self, before: bool) -> list[SubscriberRecord]:
        return self.before if before else self.after

    def is_empty(self) -> bool:
        return not self.before and not self.after


class SubscriptionRegistry:
    """Registry table for event subscribers.

    Invariant: a bucket whose ``before`` and ``after`` sequences are both
    empty is removed from the table.

    Subscribing to, or unsubscribing from, a concrete topic runs the
    matching notifiers of the shared :class:`NotificationRegistry`.
    """

    def __init__(self, notifications: NotificationRegistry) -> None:
        """Initialize empty registry.

        Post:
            _buckets is empty.
        """
        self._notifications = notifications
        self._buckets: dict[str, Bucket] = {}

    def __len__(self) -> int:
        return len(self._buckets)

    def __contains__(self, key: str) -> bool:
        return key in self._buckets

    def get(self, key: str) -> Bucket | None:
        return self._buckets.get(key)

    def keys(self) -> list[str]:
        return list(self._buckets)

    def add(
        self,
        topic: Topic,
        record: SubscriberRecord,
        *,
        before: bool,
        prepend: bool = False,
    ) -> None:
        """Register *record* on *topic*.

        Args:
            topic: Concrete or wildcard topic, already resolved.
            record: Subscriber record to store.
            before: Store in the before sequence, else in the after sequence.
            prepend: Insert at position 0 instead of appending.

        Post:
            record stored; notifiers fired when *topic* is concrete.
        """
        key = topic.key
        if not topic.is_wildcard:
            self._notifications.fire_subscribed(topic, record)

        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = self._buckets[key] = Bucket(topic)
        records = bucket.phase(before)
        if prepend:
            records.insert(0, record)
        else:
            records.append(record)
        log.debug(
            "Subscribed {} to '{}' ({}{})",
            callable_name(record.callback),
            key,
            "before" if before else "after",
            ", prepended" if prepend else "",
        )

    def discard(self, key: str, record: SubscriberRecord, *, before: bool) -> bool:
        """Remove exactly one record (by identity).

        Returns:
            True if the record was found and removed.
        """
        bucket = self._buckets.get(key)
        if bucket is None:
            return False
        records = bucket.phase(before)
        for index, candidate in enumerate(records):
            if candidate is record:
                del records[index]
                self._after_removal(bucket, 1)
                return True
        return False

    def remove(
        self,
        owner: Any,
        key: str,
        callback: Callback | None = None,
        *,
        phases: tuple[bool, ...] = (True, False),
    ) -> int:
        """Remove records of *owner* from one topic key.

        Supports three modes:
        - (owner, key, callback): Remove that owner's records of *callback*.
        - (owner, key): Remove every record of *owner*.
        - (ANY_OWNER, key): Remove every record regardless of owner.

        Args:
            owner: Owner to match, or ``ANY_OWNER``.
            key: Topic key as stored.
            callback: Restrict removal to this callback.
            phases: Which sequences to clean (True = before, False = after).

        Returns:
            Number of removed records.

        Post:
            Empty bucket deleted; detach-notifiers fired when records were
            removed from a concrete topic.
        """
        bucket = self._buckets.get(key)
        if bucket is None:
            return 0
        removed = 0
        for before in phases:
            records = bucket.phase(before)
            kept = [
                record
                for record in records
                if not (
                    (owner is ANY_OWNER or record.owner is owner)
                    and (callback is None or record.callback == callback)
                )
            ]
            removed += len(records) - len(kept)
            records[:] = kept
        self._after_removal(bucket, removed)
        return removed

    def remove_matching(self, owner: Any, pattern: Topic) -> int:
        """Remove *owner*'s records from every key selected by *pattern*.

        A concrete pattern touches one key; a wildcard pattern is compared
        position-wise against every stored key (stored wildcard keys included).
        """
        if not pattern.is_wildcard:
            return self.remove(owner, pattern.key)
        removed = 0
        for key, bucket in list(self._buckets.items()):
            if pattern.matches(bucket.topic):
                removed += self.remove(owner, key)
        return removed

    def clear(self) -> None:
        """Drop every bucket."""
        self._buckets.clear()

    def _after_removal(self, bucket: Bucket, removed: int) -> None:
        topic = bucket.topic
        if bucket.is_empty() and self._buckets.get(topic.key) is bucket:
            del self._buckets[topic.key]
        if removed:
            log.debug("Removed {} subscriber(s) from '{}'", removed, topic.key)
            if not topic.is_wildcard:
                self._notifications.fire_detached(topic)
