"""Integration tests for a complete publish/subscribe flow."""

from signalon import Dispatcher, Emitter, Listener


class Store(Emitter):
    """Defines its events lazily, once somebody subscribes."""

    def __init__(self, dispatcher: Dispatcher):
        super().__init__("Store", dispatcher)
        self.items: list[str] = []
        self.log: list[str] = []
        dispatcher.notify("Store:*", self._activate, self)
        dispatcher.notify_detach("Store:*", self._deactivate, self)

    def _activate(self, topic, record):
        if topic == "Store:add" and "Store:add" not in self.dispatcher.context.definitions:
            self.define_event("add").default_fn(self._add).prevented_fn(self._rejected)
            self.log.append("defined")

    def _deactivate(self, topic):
        if topic not in self.dispatcher.context.subscriptions:
            self.undefine_event("add")
            self.log.append("undefined")

    def _add(self, event):
        self.items.append(event.item)
        return len(self.items)

    def _rejected(self, event):
        self.log.append(f"rejected {event.item}")

    def add(self, item: str):
        return self.emit("add", {"item": item})


class Auditor(Listener):
    def __init__(self, dispatcher: Dispatcher):
        super().__init__(dispatcher)
        self.entries: list[str] = []
        self.before("Store:add", self.validate)
        self.after("*:add", self.record)

    def validate(self, event):
        if not event.item:
            event.prevent_default("empty item")

    def record(self, event):
        self.entries.append(f"{event.emitter}:{event.item}:{event.return_value}")


class TestFullFlow:
    def test_lazy_definition_lifecycle(self):
        """Definition appears with the first subscriber and goes with the last."""
        dispatcher = Dispatcher()
        store = Store(dispatcher)

        assert store.add("early").status.default_fn is None
        assert store.items == []

        auditor = Auditor(dispatcher)
        assert store.log == ["defined"]

        event = store.add("apple")
        assert event.status.ok is True
        assert event.return_value == 1
        assert store.items == ["apple"]
        assert auditor.entries == ["Store:apple:1"]

        event = store.add("")
        assert event.status.default_prevented == "empty item"
        assert store.log[-1] == "rejected "
        assert auditor.entries == ["Store:apple:1"]

        auditor.destroy()
        assert store.log[-1] == "undefined"
        assert "Store:add" not in dispatcher.context.definitions

    def test_many_emitters_one_listener(self):
        dispatcher = Dispatcher()
        seen = []
        dispatcher.after("*:*", lambda e: seen.append(f"{e.emitter}:{e.type}"))

        class Light(Emitter):
            def __init__(self, name):
                super().__init__(name, dispatcher)

        kitchen, hall = Light("kitchen"), Light("hall")
        kitchen.emit("on")
        hall.emit("off")
        dispatcher.emit("ready")

        assert seen == ["kitchen:on", "hall:off", "UI:ready"]
