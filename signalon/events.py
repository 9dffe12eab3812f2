"""Event object handed to every subscriber of one emission.

An event is created fresh for each emission.  It carries the emitter
(``target``), the event name (``type``), the emitter name (``emitter``), a
:class:`EventStatus` record and any payload fields merged in by the
dispatcher.  Once the emission completes the object is a read-only record
of what happened.
"""

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict


class EventStatus(BaseModel):
    """Outcome of an emission, filled in while it runs.

    Attributes:
        ok: True when neither halted nor default-prevented; None until the
            before phase has finished.
        default_fn: True when the definition's default function ran.
        prevented_fn: True when the definition's prevented function ran.
        halted: Reason passed to :meth:`CustomEvent.halt`, or True.
        default_prevented: Reason passed to
            :meth:`CustomEvent.prevent_default`, or True.
        default_prevented_continue: Reason passed to
            :meth:`CustomEvent.prevent_default_continue`, or True.
        un_silencable: Copied from the definition; subscribers cannot
            silence the event.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    ok: bool | None = None
    default_fn: bool | None = None
    prevented_fn: bool | None = None
    halted: bool | str | None = None
    default_prevented: bool | str | None = None
    default_prevented_continue: bool | str | None = None
    un_silencable: bool = False


def _as_reason(reason: Any) -> bool | str:
    """Status value for a halt or prevent reason; non-strings are stringified."""
    if not reason:
        return True
    return reason if isinstance(reason, str) else str(reason)


class CustomEvent:
    """Event object passed to subscribers, filters and definition functions.

    Payload fields become attributes of the event.  ``silent``,
    ``source_target`` and ``no_reset_source_target`` may be supplied through
    the payload; everything else already present on the event is never
    overwritten by a payload field.

    Example:
        >>> dispatcher.after("red:save", lambda e: print(e.type, e.record_id))
        >>> dispatcher.emit("red:save", {"record_id": 7})
        save 7
    """

    silent: bool = False
    source_target: Any = None
    no_reset_source_target: bool = False
    return_value: Any = None

    def __init__(self, target: Any, type: str, emitter: str) -> None:
        self.target = target
        self.type = type
        self.emitter = emitter
        self.status = EventStatus()
        self._un_haltable = False
        self._un_preventable = False
        self._getters: dict[str, Callable[["CustomEvent"], Any]] = {}

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails: computed payload fields.
        getters = self.__dict__.get("_getters")
        if getters and name in getters:
            return getters[name](self)
        raise AttributeError(
            f"{type(self).__name__!r} object has no attribute {name!r}"
        )

    def __repr__(self) -> str:
        return f"<CustomEvent {self.emitter}:{self.type} status={self.status!r}>"

    def halt(self, reason: Any = None) -> None:
        """Stop the emission: no default/prevented function, no after phase."""
        if self.status.ok is not None or self._un_haltable:
            return
        self.status.halted = _as_reason(reason)

    def prevent_default(self, reason: Any = None) -> None:
        """Run the prevented function instead of the default, skip the after phase."""
        if self.status.ok is not None or self._un_preventable:
            return
        self.status.default_prevented = _as_reason(reason)

    def prevent_default_continue(self, reason: Any = None) -> None:
        """Run the prevented function instead of the default, keep the after phase."""
        if self.status.ok is not None or self._un_preventable:
            return
        self.status.default_prevented_continue = _as_reason(reason)

    def restrict(
        self,
        *,
        un_haltable: bool = False,
        un_preventable: bool = False,
        un_silencable: bool = False,
    ) -> None:
        """Apply the control flags of the topic's definition."""
        self._un_haltable = un_haltable
        self._un_preventable = un_preventable
        self.status.un_silencable = un_silencable

    def is_reserved(self, name: str) -> bool:
        """Whether *name* is already taken by the event itself."""
        if name in self.__dict__ or name in self._getters:
            return True
        return callable(getattr(type(self), name, None))

    def merge_payload(self, payload: Any) -> None:
        """Copy payload fields onto the event without overwriting existing ones.

        A mapping is merged item by item.  Any other object contributes its
        instance attributes (``__dict__`` and slots) plus the ``property``
        getters of its class; the getters stay live, so computed fields keep
        working after the merge.

        Args:
            payload: Mapping or plain object, or None.
        """
        if payload is None:
            return
        if isinstance(payload, Mapping):
            for key, value in payload.items():
                if not self.is_reserved(key):
                    setattr(self, key, value)
            return

        for key, value in getattr(payload, "__dict__", {}).items():
            if not self.is_reserved(key):
                setattr(self, key, value)

        for klass in type(payload).__mro__:
            slots = vars(klass).get("__slots__", ())
            for name in (slots,) if isinstance(slots, str) else slots:
                if name in ("__dict__", "__weakref__") or self.is_reserved(name):
                    continue
                try:
                    value = getattr(payload, name)
                except AttributeError:
                    # unset slot
                    continue
                setattr(self, name, value)

        seen: set[str] = set()
        for klass in type(payload).__mro__:
            for name, attr in vars(klass).items():
                if name in seen or not isinstance(attr, property):
                    continue
                seen.add(name)
                if attr.fget is not None and not self.is_reserved(name):
                    self._getters[name] = lambda _e, fget=attr.fget: fget(payload)

    def merge_getters(self, getters: Mapping[str, Callable[["CustomEvent"], Any]]) -> None:
        """Attach lazily evaluated fields; each getter receives the event."""
        for name, getter in getters.items():
            if not self.is_reserved(name):
                self._getters[name] = getter
