"""Synchronous dispatcher for event handling."""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from loguru import logger

from signalon._types import PreProcessor
from signalon.base_dispatcher import BaseDispatcher
from signalon.definitions import Definition
from signalon.events import CustomEvent
from signalon.exceptions import ReentrantEmitError, TopicError
from signalon.registry import SubscriberRecord
from signalon.topics import Topic, parse_concrete
from signalon.utils import callable_name

log = logger.bind(source=__name__)


class Dispatcher(BaseDispatcher):
    """Synchronous event dispatcher.

    Every emission runs three phases in order:

    1. before-subscribers of the exact topic, ``*:event``, ``emitter:*``
       and ``*:*`` (in that order);
    2. the definition's prevented function when the event was
       default-prevented, otherwise its default function (skipped when
       halted or when the topic has no definition);
    3. after-subscribers, same key order, only when ``status.ok``.

    A topic cannot be emitted again from within its own dispatch; such an
    inner emission is dropped with a warning.  Tasks deferred by subscribers
    (one-shot detachment) run once the outermost emission has finished.
    """

    def dispatch(
        self,
        emitter: Any,
        topic: str,
        payload: Any = None,
        *,
        before_subscribers: Iterable[SubscriberRecord] | None = None,
        after_subscribers: Iterable[SubscriberRecord] | None = None,
        pre_processor: PreProcessor | None = None,
        keep_payload: bool = False,
        payload_getters: Mapping[str, Callable[[CustomEvent], Any]] | None = None,
    ) -> CustomEvent | None:
        """Synchronously dispatch *topic* on behalf of *emitter*.

        :meth:`emit` is the public form.  The extra keyword arguments let
        collaborators (e.g. DOM-style delegation layers) take over
        subscriber selection.

        Args:
            emitter: Event target.
            topic: ``emitter:event``, or a bare event name qualified with
                ``emitter.emitter_name`` (default emitter when absent).
            payload: Mapping or object merged into the event.
            before_subscribers: Replace the registered before-subscribers;
                their filters are not evaluated.
            after_subscribers: Replace the registered after-subscribers.
            pre_processor: Called as ``pre_processor(record, event)`` ahead of
                each override subscriber; returning True ends the pass.
            keep_payload: Use *payload* itself as the event object when it
                already is a :class:`CustomEvent`.
            payload_getters: Lazily computed event fields.

        Returns:
            The event object, or None when the topic is malformed or already
            being dispatched.

        Post:
            Re-entrancy guard for the topic released, deferred tasks run when
            this was the outermost emission.

        Raises:
            TopicError: Malformed topic (strict mode only).
            ReentrantEmitError: Topic is already being dispatched (strict mode only).
            Exception: Anything raised by subscribers, filters or definition
                functions propagates unchanged.
        """
        if isinstance(topic, str) and ":" not in topic:
            emitter_name = (
                getattr(emitter, "emitter_name", None) or self._settings.default_emitter
            )
            topic = f"{emitter_name}:{topic}"

        parsed = parse_concrete(topic)
        if parsed is None:
            return self._fail(
                TopicError(f"emit-event {topic!r} does not match pattern")
            )

        key = parsed.key
        running = self._context.running
        if key in running:
            return self._fail(
                ReentrantEmitError(
                    f"emit-event {key!r} got emitted by one of its own subscribers; "
                    "it will not be emitted again"
                ),
                level="WARNING",
            )

        running.add(key)
        log.debug("Emit '{}'", key)
        try:
            return self._run_phases(
                emitter,
                parsed,
                payload,
                before_subscribers,
                after_subscribers,
                pre_processor,
                keep_payload,
                payload_getters,
            )
        finally:
            running.discard(key)
            if not running:
                self._context.deferred.run_pending()

    def _run_phases(
        self,
        emitter: Any,
        topic: Topic,
        payload: Any,
        before_subscribers: Iterable[SubscriberRecord] | None,
        after_subscribers: Iterable[SubscriberRecord] | None,
        pre_processor: PreProcessor | None,
        keep_payload: bool,
        payload_getters: Mapping[str, Callable[[CustomEvent], Any]] | None,
    ) -> CustomEvent:
        definition = self._context.definitions.get(topic.key)
        if keep_payload and isinstance(payload, CustomEvent):
            event = payload
        else:
            event = self._build_event(emitter, topic, definition, payload, payload_getters)
        status = event.status

        if before_subscribers is not None:
            self._invoke_subscribers(
                event, before_subscribers, before=True, pre_processor=pre_processor
            )
        else:
            for records in self._registered(topic, before=True):
                self._invoke_subscribers(event, records, before=True, check_filter=True)

        status.ok = not status.halted and not status.default_prevented
        if event.source_target is not None and not event.no_reset_source_target:
            event.target = event.source_target

        if definition is not None and not status.halted:
            self._run_definition(event, definition)

        if status.ok:
            if after_subscribers is not None:
                self._invoke_subscribers(
                    event, after_subscribers, before=False, pre_processor=pre_processor
                )
            else:
                for records in self._registered(topic, before=False):
                    self._invoke_subscribers(
                        event, records, before=False, check_filter=True
                    )
        return event

    def _build_event(
        self,
        emitter: Any,
        topic: Topic,
        definition: Definition | None,
        payload: Any,
        payload_getters: Mapping[str, Callable[[CustomEvent], Any]] | None,
    ) -> CustomEvent:
        event = CustomEvent(emitter, topic.event, topic.emitter)
        if definition is not None:
            event.restrict(
                un_haltable=definition.un_haltable,
                un_preventable=definition.un_preventable,
                un_silencable=definition.un_silencable,
            )
        event.merge_payload(payload)
        if payload_getters:
            event.merge_getters(payload_getters)
        self._keep_audible(event)
        return event

    def _registered(self, topic: Topic, *, before: bool) -> list[list[SubscriberRecord]]:
        """Subscriber sequences of the four lookup keys, in dispatch order."""
        subscriptions = self._context.subscriptions
        sequences = []
        for key in topic.lookup_keys():
            bucket = subscriptions.get(key)
            if bucket is not None:
                sequences.append(bucket.phase(before))
        return sequences

    def _invoke_subscribers(
        self,
        event: CustomEvent,
        records: Iterable[SubscriberRecord],
        *,
        before: bool,
        check_filter: bool = False,
        pre_processor: PreProcessor | None = None,
    ) -> None:
        """Run one pass over *records*.

        The pass is skipped when the event is already silent or halted, and
        ends as soon as it becomes silent (or halted, in the before phase).
        Iterates a snapshot, so records added or removed meanwhile do not
        affect this pass.
        """
        status = event.status
        if status.halted or event.silent:
            return
        for record in tuple(records):
            if pre_processor is not None and pre_processor(record, event):
                break
            if self._accepts(record, event, check_filter):
                record.callback(event)
            self._keep_audible(event)
            if event.silent or (before and status.halted):
                break

    @staticmethod
    def _accepts(record: SubscriberRecord, event: CustomEvent, check_filter: bool) -> bool:
        if record.self_only and record.owner is not event.target:
            return False
        if check_filter and callable(record.filter) and not record.filter(event):
            return False
        return True

    @staticmethod
    def _run_definition(event: CustomEvent, definition: Definition) -> None:
        status = event.status
        if status.default_prevented or status.default_prevented_continue:
            if definition.prevented_fn is not None:
                status.prevented_fn = True
                log.debug(
                    "Running preventedFn {} of '{}:{}'",
                    callable_name(definition.prevented_fn),
                    event.emitter,
                    event.type,
                )
                event.return_value = definition.prevented_fn(event)
        elif definition.default_fn is not None:
            status.default_fn = True
            log.debug(
                "Running defaultFn {} of '{}:{}'",
                callable_name(definition.default_fn),
                event.emitter,
                event.type,
            )
            event.return_value = definition.default_fn(event)

    @staticmethod
    def _keep_audible(event: CustomEvent) -> None:
        if event.status.un_silencable and event.silent:
            log.warning(
                "Event {}:{} cannot be made silent: it is defined as unSilencable",
                event.emitter,
                event.type,
            )
            event.silent = False
