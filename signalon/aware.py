"""Listener and Emitter capabilities for objects that take part in events.

Provides ``Listener`` (subscribes on its own behalf) and ``Emitter`` (also
raises events under its own emitter name).  Both forward to a dispatcher
explicitly; nothing is merged into the object at runtime.
"""

from types import TracebackType
from typing import TYPE_CHECKING, Any

from loguru import logger

from signalon._types import Callback, Filter
from signalon.definitions import DefinitionBuilder
from signalon.events import CustomEvent
from signalon.exceptions import EmitterNameError
from signalon.handles import Handle, MultiHandle

if TYPE_CHECKING:
    from signalon.base_dispatcher import BaseDispatcher

log = logger.bind(source=__name__)


class Listener:
    """Object that owns its subscriptions.

    Every subscription made through the listener is recorded with the
    listener as owner, so ``detach()``/``detach_all()`` only ever touch its
    own records and ``this:`` topics resolve against its emitter name.

    Supports context manager protocol for scoped subscription lifetime::

        with Panel() as panel:
            panel.after("red:save", panel.refresh)
            dispatcher.emit("red:save")
        # subscriptions automatically removed here

    Subclasses must call ``super().__init__()``.
    """

    def __init__(self, dispatcher: "BaseDispatcher | None" = None) -> None:
        if dispatcher is None:
            from signalon import default_dispatcher

            dispatcher = default_dispatcher
        self._dispatcher = dispatcher
        self._destroyed = False

    @property
    def dispatcher(self) -> "BaseDispatcher":
        return self._dispatcher

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def before(
        self,
        topics: str | list[str],
        callback: Callback,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        return self._dispatcher.before(
            topics, callback, self, when=when, prepend=prepend
        )

    def after(
        self,
        topics: str | list[str],
        callback: Callback,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        return self._dispatcher.after(topics, callback, self, when=when, prepend=prepend)

    def once_before(
        self,
        topics: str | list[str],
        callback: Callback,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        return self._dispatcher.once_before(
            topics, callback, self, when=when, prepend=prepend
        )

    def once_after(
        self,
        topics: str | list[str],
        callback: Callback,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        return self._dispatcher.once_after(
            topics, callback, self, when=when, prepend=prepend
        )

    def self_before(
        self,
        topics: str | list[str],
        callback: Callback,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        """Like :meth:`before`, but only for events whose target is this object.

        Unlike ``this:`` topics, *topics* may name any emitter or wildcard;
        the target check is added to the filter.  A string *when* is not
        carried over, since the record's filter becomes that check.
        """
        return self.before(topics, callback, when=self._own_events(when), prepend=prepend)

    def self_after(
        self,
        topics: str | list[str],
        callback: Callback,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        return self.after(topics, callback, when=self._own_events(when), prepend=prepend)

    def self_once_before(
        self,
        topics: str | list[str],
        callback: Callback,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        """One-shot :meth:`self_before`; events of other targets do not use it up."""
        return self.once_before(
            topics, callback, when=self._own_events(when), prepend=prepend
        )

    def self_once_after(
        self,
        topics: str | list[str],
        callback: Callback,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        return self.once_after(
            topics, callback, when=self._own_events(when), prepend=prepend
        )

    def _own_events(self, when: Filter | None) -> Filter:
        def accept(event: CustomEvent) -> bool:
            if event.target is not self:
                return False
            return not callable(when) or bool(when(event))

        return accept

    def detach(self, topic: str) -> None:
        """Remove this listener's subscriptions matching *topic*."""
        self._dispatcher.detach(topic, self)

    def detach_all(self) -> None:
        """Remove every subscription of this listener."""
        self._dispatcher.detach_all(self)

    def destroy(self) -> None:
        """Detach everything.  Safe to call multiple times."""
        if self._destroyed:
            return
        self.detach_all()
        self._destroyed = True
        log.debug("Destroyed {}", type(self).__qualname__)

    def __enter__(self) -> "Listener":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Remove all subscriptions made by this instance."""
        self.destroy()


class Emitter(Listener):
    """Listener that also emits events under its own emitter name.

    Example::

        class Profile(Emitter):
            def __init__(self, name):
                super().__init__("PersonalProfile")
                self.name = name
                self.after("this:send", self.sent)

            def sent(self, event):
                ...

        Profile("a").emit("send")  # only this profile's sent() runs

    Raises:
        EmitterNameError: If *emitter_name* is invalid or the object already
            carries a different emitter name.
    """

    emitter_name: str

    def __init__(
        self, emitter_name: str, dispatcher: "BaseDispatcher | None" = None
    ) -> None:
        super().__init__(dispatcher)
        if not self._dispatcher.define_emitter(self, emitter_name):
            raise EmitterNameError(f"cannot use emitter name {emitter_name!r}")

    def emit(self, topic: str, payload: Any = None) -> CustomEvent | None:
        """Emit with this object as target; bare names get its emitter prefix."""
        return self._dispatcher.emit(topic, payload, emitter=self)

    def define_event(self, event_name: str) -> DefinitionBuilder | None:
        return self._dispatcher.define_event(f"{self.emitter_name}:{event_name}")

    def undefine_event(self, event_name: str) -> None:
        self._dispatcher.undefine_event(f"{self.emitter_name}:{event_name}")

    def undefine_all_events(self) -> None:
        """Remove every definition made under this emitter name."""
        self._dispatcher.undefine_all_events(self.emitter_name)

    def destroy(self) -> None:
        """Detach everything and drop this emitter's definitions."""
        if self._destroyed:
            return
        super().destroy()
        self.undefine_all_events()
