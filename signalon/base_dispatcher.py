"""Abstract base class for dispatchers: subscriptions, definitions and notifiers."""

import functools
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Self

from loguru import logger

from signalon._types import Callback, DetachNotifyCallback, Filter, NotifyCallback
from signalon.context import DispatchContext
from signalon.definitions import DefinitionBuilder
from signalon.events import CustomEvent
from signalon.exceptions import EmitterNameError, SignalError, TopicError
from signalon.handles import Handle, MultiHandle
from signalon.registry import ANY_OWNER, SubscriberRecord
from signalon.settings import DispatcherSettings
from signalon.topics import (
    SELF_EMITTER,
    WILDCARD,
    Topic,
    is_valid_name,
    parse_concrete,
    parse_topic,
)
from signalon.utils import as_list, callable_name

log = logger.bind(source=__name__)


class BaseDispatcher(ABC):
    """Abstract base class for event dispatchers.

    Provides everything except the emission itself:
    - Subscription (before/after, one-shot, decorator) and detachment
    - Custom-event definitions
    - Notifiers
    - Context and settings management

    Subclasses must implement:
    - dispatch() - Event dispatching logic
    """

    emitter_name: str
    _context: DispatchContext
    _settings: DispatcherSettings

    def __init__(
        self,
        settings: DispatcherSettings | None = None,
        context: DispatchContext | None = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            settings: Behaviour switches (default: ``DispatcherSettings()``).
            context: Shared tables; a fresh context when omitted.
        """
        self._settings = settings or DispatcherSettings()
        self._context = context or DispatchContext()
        self.emitter_name = self._settings.default_emitter

    @property
    def settings(self) -> DispatcherSettings:
        return self._settings

    @property
    def context(self) -> DispatchContext:
        return self._context

    # -- subscriptions ----------------------------------------------------------

    def before(
        self,
        topics: str | list[str],
        callback: Callback,
        owner: Any = None,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        """Subscribe *callback* to run before the default function.

        Before-subscribers may ``halt()``, ``prevent_default()`` or silence
        the event.

        Args:
            topics: Topic or list of topics; ``*`` wildcards, a missing
                emitter (default emitter) and ``this:`` are accepted.
            callback: Called with the event.
            owner: Listening party (default: the dispatcher itself).
            when: Predicate; the callback only runs when it returns truthy.
            prepend: Run before subscribers registered earlier.

        Returns:
            Handle (MultiHandle for a list), or None when a topic is invalid.

        Raises:
            TopicError: Malformed topic (strict mode only).
            EmitterNameError: ``this:`` without owner emitter name (strict mode only).
        """
        return self._subscribe(True, topics, callback, owner, when, prepend)

    def after(
        self,
        topics: str | list[str],
        callback: Callback,
        owner: Any = None,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        """Subscribe *callback* to run after the default function.

        After-subscribers only run when the event was neither halted nor
        default-prevented.  Arguments as for :meth:`before`.
        """
        return self._subscribe(False, topics, callback, owner, when, prepend)

    def once_before(
        self,
        topics: str | list[str],
        callback: Callback,
        owner: Any = None,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        """Like :meth:`before`, but *callback* runs at most once."""
        return self._subscribe_once(True, topics, callback, owner, when, prepend)

    def once_after(
        self,
        topics: str | list[str],
        callback: Callback,
        owner: Any = None,
        *,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Handle | MultiHandle | None:
        """Like :meth:`after`, but *callback* runs at most once."""
        return self._subscribe_once(False, topics, callback, owner, when, prepend)

    def on(
        self,
        *topics: str,
        before: bool = False,
        owner: Any = None,
        when: Filter | None = None,
        prepend: bool = False,
    ) -> Callable[[Callback], Callback]:
        """Decorator to subscribe a plain function.

        Example::

            @dispatcher.on("red:save", before=True)
            def check(event):
                if not event.valid:
                    event.prevent_default("invalid")

        Returns:
            Decorator function that returns the original function unchanged.
        """

        def decorator(func: Callback) -> Callback:
            self._subscribe(before, list(topics), func, owner, when, prepend)
            return func

        return decorator

    def detach(self, topic: str, owner: Any = None) -> None:
        """Remove *owner*'s subscriptions from every topic matching *topic*.

        Args:
            topic: Concrete topic or pattern (``red:*``, ``*:save``, ``*:*``).
            owner: Owner whose records go (default: the dispatcher itself);
                ``ANY_OWNER`` removes every record.
        """
        owner = self if owner is None else owner
        pattern = parse_topic(topic, self._settings.default_emitter)
        if pattern is None:
            self._fail(TopicError(f"detach-error: topic {topic!r} does not match pattern"))
            return
        if pattern.emitter == SELF_EMITTER:
            pattern = self._resolve_self(pattern, owner)
            if pattern is None:
                return
        self._context.subscriptions.remove_matching(owner, pattern)

    def detach_all(self, owner: Any = None) -> None:
        """Remove every subscription of *owner*, or every subscription at all."""
        if owner is None:
            self._context.subscriptions.clear()
            log.debug("Detached all subscribers")
            return
        self._context.subscriptions.remove_matching(owner, Topic(WILDCARD, WILDCARD))

    # -- emitters and definitions ----------------------------------------------

    def define_emitter(self, emitter: Any, emitter_name: str) -> bool:
        """Give *emitter* its emitter name.

        The name is assigned once; a later different name is rejected.

        Returns:
            True if *emitter* now carries *emitter_name*.
        """
        if not is_valid_name(emitter_name):
            self._fail(EmitterNameError(f"invalid emitter name {emitter_name!r}"))
            return False
        current = getattr(emitter, "emitter_name", None)
        if current is not None and current != emitter_name:
            log.warning(
                "Emitter already named '{}'; ignoring new name '{}'",
                current,
                emitter_name,
            )
            return False
        emitter.emitter_name = emitter_name
        return True

    def define_event(self, topic: str) -> DefinitionBuilder | None:
        """Define default behaviour and control flags of a concrete topic.

        Example::

            dispatcher.define_event("red:save").default_fn(store).un_haltable()

        Returns:
            Chainable builder, or None when *topic* is not ``emitter:event``.
        """
        parsed = parse_concrete(topic)
        if parsed is None:
            return self._fail(
                TopicError(f"defined customEvent {topic!r} does not match pattern")
            )
        return self._context.definitions.define(parsed)

    def undefine_event(self, topic: str) -> None:
        self._context.definitions.undefine(topic)

    def undefine_all_events(self, emitter_name: str | None = None) -> None:
        """Remove the definitions of *emitter_name*, or all definitions."""
        self._context.definitions.undefine_all(emitter_name)

    # -- notifiers --------------------------------------------------------------

    def notify(
        self,
        topics: str | list[str],
        callback: NotifyCallback,
        owner: Any = None,
        once: bool = False,
    ) -> Self:
        """Call ``callback(topic, record)`` when a matching topic gets a subscriber.

        *topics* may be concrete or use ``*`` for either part.  Only
        subscriptions to concrete topics trigger notifiers.
        """
        self._context.notifications.notify(topics, callback, owner, once)
        return self

    def notify_detach(
        self,
        topics: str | list[str],
        callback: DetachNotifyCallback,
        owner: Any = None,
        once: bool = False,
    ) -> Self:
        """Call ``callback(topic)`` when subscribers are removed from a matching topic.

        Matched are the concrete topic itself and its ``emitter:*`` form.
        """
        self._context.notifications.notify_detach(topics, callback, owner, once)
        return self

    def un_notify(self, topic: str) -> None:
        self._context.notifications.un_notify(topic)

    def un_notify_detach(self, topic: str) -> None:
        self._context.notifications.un_notify_detach(topic)

    def reset(self) -> None:
        """Drop all subscriptions, definitions, notifiers and pending work."""
        self._context.reset()

    # -- emission ---------------------------------------------------------------

    def emit(
        self,
        topic: str,
        payload: Any = None,
        *,
        emitter: Any = None,
    ) -> CustomEvent | None:
        """Emit *topic* and run its subscribers synchronously.

        Args:
            topic: ``emitter:event``, or a bare event name qualified with the
                emitter's ``emitter_name``.
            payload: Mapping or object whose fields are merged into the event.
            emitter: Event target (default: the dispatcher itself).

        Returns:
            The event object, or None when the emission was rejected.
        """
        return self.dispatch(self if emitter is None else emitter, topic, payload)

    @abstractmethod
    def dispatch(
        self,
        emitter: Any,
        topic: str,
        payload: Any = None,
        **options: Any,
    ) -> CustomEvent | None:
        """Dispatch event to subscribers.

        Args:
            emitter: Event target.
            topic: Concrete topic or bare event name.
            payload: Event payload.

        Returns:
            The event object, or None when the emission was rejected.
        """
        raise NotImplementedError

    # -- internals --------------------------------------------------------------

    def _subscribe(
        self,
        before: bool,
        topics: str | list[str],
        callback: Callback,
        owner: Any,
        when: Filter | None,
        prepend: bool,
    ) -> Handle | MultiHandle | None:
        owner = self if owner is None else owner
        resolved: list[tuple[Topic, bool]] = []
        for topic in as_list(topics):
            target = self._resolve_subscription(topic, owner)
            if target is None:
                return None
            resolved.append(target)

        registry = self._context.subscriptions
        handles: list[Handle] = []
        for topic, self_only in resolved:
            record = SubscriberRecord(owner, callback, when, self_only)
            registry.add(topic, record, before=before, prepend=prepend)
            handles.append(Handle(registry, topic.key, record, before=before))

        if isinstance(topics, (list, tuple)):
            return MultiHandle(handles)
        return handles[0]

    def _subscribe_once(
        self,
        before: bool,
        topics: str | list[str],
        callback: Callback,
        owner: Any,
        when: Filter | None,
        prepend: bool,
    ) -> Handle | MultiHandle | None:
        handle: Handle | MultiHandle | None = None
        fired = False

        @functools.wraps(callback)
        def once(event: CustomEvent) -> None:
            nonlocal fired
            # May run again before the deferred detach; only the first call counts.
            if fired:
                return
            fired = True
            if handle is not None:
                self._context.deferred.schedule(handle.detach)
            callback(event)

        handle = self._subscribe(before, topics, once, owner, when, prepend)
        return handle

    def _resolve_subscription(self, topic: str, owner: Any) -> tuple[Topic, bool] | None:
        parsed = parse_topic(topic, self._settings.default_emitter)
        if parsed is None:
            return self._fail(
                TopicError(f"subscribe-error: topic {topic!r} does not match pattern")
            )
        if parsed.emitter != SELF_EMITTER:
            return parsed, False
        resolved = self._resolve_self(parsed, owner)
        if resolved is None:
            return None
        return resolved, True

    def _resolve_self(self, topic: Topic, owner: Any) -> Topic | None:
        emitter_name = getattr(owner, "emitter_name", None)
        if not emitter_name:
            return self._fail(
                EmitterNameError(
                    f"'this' in {topic.key!r} cannot be resolved: "
                    f"{callable_name(type(owner))} has no emitter name"
                )
            )
        return topic.with_emitter(emitter_name)

    def _fail(self, error: SignalError, level: str = "ERROR") -> None:
        """Raise *error* in strict mode, otherwise log it."""
        if self._settings.strict:
            raise error
        log.log(level, "{}", error)
        return None
