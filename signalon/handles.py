"""Subscription handles returned by every subscribe call."""

from collections.abc import Iterator

from signalon.registry import SubscriberRecord, SubscriptionRegistry


class Handle:
    """Capability to remove one subscription.

    ``detach()`` removes exactly the record this handle was created for and
    is safe to call any number of times.
    """

    def __init__(
        self,
        registry: SubscriptionRegistry,
        key: str,
        record: SubscriberRecord,
        *,
        before: bool,
    ) -> None:
        self._registry = registry
        self._key = key
        self._record = record
        self._before = before
        self._detached = False

    def __repr__(self) -> str:
        phase = "before" if self._before else "after"
        return f"<Handle {self._key} {phase}{' detached' if self._detached else ''}>"

    @property
    def topic(self) -> str:
        return self._key

    @property
    def record(self) -> SubscriberRecord:
        return self._record

    @property
    def detached(self) -> bool:
        return self._detached

    def detach(self) -> None:
        if self._detached:
            return
        self._detached = True
        self._registry.discard(self._key, self._record, before=self._before)


class MultiHandle:
    """Handle for a multi-topic subscription; detaches all of them together."""

    def __init__(self, handles: list[Handle]) -> None:
        self._handles = handles

    def __iter__(self) -> Iterator[Handle]:
        return iter(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    @property
    def detached(self) -> bool:
        return all(handle.detached for handle in self._handles)

    def detach(self) -> None:
        for handle in self._handles:
            handle.detach()
