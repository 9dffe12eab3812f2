"""Tests for custom-event definitions."""

from conftest import levels

from signalon import DefinitionBuilder


class TestDefineEvent:
    def test_builder_chain(self, dispatcher):
        builder = dispatcher.define_event("red:save")
        assert isinstance(builder, DefinitionBuilder)

        def store(event): ...

        builder.default_fn(store).un_haltable().un_silencable()
        definition = dispatcher.context.definitions.get("red:save")

        assert definition.default_fn is store
        assert definition.un_haltable is True
        assert definition.un_silencable is True
        assert definition.un_preventable is False
        assert definition.preventable is True

    def test_no_override_without_force_assign(self, dispatcher):
        """Redefining leaves the first definition in place."""
        calls = []
        dispatcher.define_event("red:save").default_fn(lambda e: calls.append("first"))
        dispatcher.define_event("red:save").default_fn(lambda e: calls.append("second"))

        dispatcher.emit("red:save")

        assert calls == ["first"]

    def test_force_assign_replaces(self, dispatcher):
        calls = []
        dispatcher.define_event("red:save").default_fn(lambda e: calls.append("first"))
        dispatcher.define_event("red:save").default_fn(
            lambda e: calls.append("second")
        ).force_assign()

        dispatcher.emit("red:save")

        assert calls == ["second"]

    def test_invalid_topic(self, dispatcher, log_messages):
        assert dispatcher.define_event("red:*") is None
        assert dispatcher.define_event("save") is None
        assert len(dispatcher.context.definitions) == 0
        assert len(levels(log_messages, "ERROR")) == 2

    def test_undefine(self, dispatcher):
        calls = []
        dispatcher.define_event("red:save").default_fn(lambda e: calls.append(1))

        dispatcher.undefine_event("red:save")
        dispatcher.undefine_event("red:save")
        event = dispatcher.emit("red:save")

        assert calls == []
        assert event.status.default_fn is None

    def test_undefine_all_by_emitter(self, dispatcher):
        """Only topics of the exact emitter name are removed."""
        for topic in ("red:save", "red:create", "redblue:save", "blue:save"):
            dispatcher.define_event(topic)

        dispatcher.undefine_all_events("red")

        definitions = dispatcher.context.definitions
        assert "redblue:save" in definitions
        assert "blue:save" in definitions
        assert "red:save" not in definitions
        assert "red:create" not in definitions

    def test_undefine_all(self, dispatcher):
        dispatcher.define_event("red:save")
        dispatcher.define_event("blue:save")

        dispatcher.undefine_all_events()

        assert len(dispatcher.context.definitions) == 0


class TestDefineEmitter:
    def test_assigns_name(self, dispatcher):
        class Panel: ...

        panel = Panel()
        assert dispatcher.define_emitter(panel, "Panel") is True
        assert panel.emitter_name == "Panel"
        assert dispatcher.define_emitter(panel, "Panel") is True

    def test_rejects_second_name(self, dispatcher, log_messages):
        class Panel: ...

        panel = Panel()
        dispatcher.define_emitter(panel, "Panel")

        assert dispatcher.define_emitter(panel, "Other") is False
        assert panel.emitter_name == "Panel"
        assert levels(log_messages, "WARNING")

    def test_rejects_invalid_name(self, dispatcher):
        class Panel: ...

        panel = Panel()
        assert dispatcher.define_emitter(panel, "bad name") is False
        assert not hasattr(panel, "emitter_name")
