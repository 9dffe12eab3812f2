"""Tests for CustomEvent and EventStatus."""

import pytest

from signalon import CustomEvent, EventStatus


@pytest.fixture
def event() -> CustomEvent:
    return CustomEvent(target=None, type="save", emitter="red")


class TestEventStatus:
    def test_initial(self):
        status = EventStatus()
        assert status.ok is None
        assert status.halted is None
        assert status.un_silencable is False

    def test_unknown_field_rejected(self):
        with pytest.raises(Exception):
            EventStatus(unknown=True)


class TestMutators:
    def test_reason_or_true(self, event):
        event.halt()
        event.prevent_default("invalid")
        assert event.status.halted is True
        assert event.status.default_prevented == "invalid"

    def test_non_string_reason(self, event):
        """Reasons that are not strings are stored as their string form."""
        event.halt(ValueError("locked"))
        event.prevent_default(404)
        event.prevent_default_continue(0)

        assert event.status.halted == "locked"
        assert event.status.default_prevented == "404"
        assert event.status.default_prevented_continue is True

    def test_noop_once_ok_decided(self, event):
        event.status.ok = True
        event.halt("late")
        event.prevent_default_continue()
        assert event.status.halted is None
        assert event.status.default_prevented_continue is None

    def test_restrict(self, event):
        event.restrict(un_haltable=True, un_preventable=True, un_silencable=True)
        event.halt()
        event.prevent_default()
        event.prevent_default_continue()

        assert event.status.halted is None
        assert event.status.default_prevented is None
        assert event.status.default_prevented_continue is None
        assert event.status.un_silencable is True


class TestMergePayload:
    def test_none(self, event):
        event.merge_payload(None)
        assert event.silent is False

    def test_reserved_names(self, event):
        event.merge_payload({"target": "x", "status": 1, "halt": 2, "silent": True})
        assert event.target is None
        assert isinstance(event.status, EventStatus)
        assert callable(event.halt)
        assert event.silent is True

    def test_slotted_object(self, event):
        class Point:
            __slots__ = ("x",)

            def __init__(self):
                self.x = 1

            @property
            def label(self):
                return f"x={self.x}"

        event.merge_payload(Point())
        assert event.x == 1
        assert event.label == "x=1"

    def test_slots_across_mro(self, event):
        """Inherited slots are merged, unset slots and reserved names skipped."""

        class Base:
            __slots__ = "record_id"

        class Save(Base):
            __slots__ = ("type", "note")

            def __init__(self):
                self.record_id = 7
                self.type = "overwrite"

        event.merge_payload(Save())

        assert event.record_id == 7
        assert event.type == "save"
        assert not hasattr(event, "note")

    def test_getters_not_overwritten(self, event):
        event.merge_getters({"total": lambda e: 1})
        event.merge_getters({"total": lambda e: 2})
        event.merge_payload({"total": 3})
        assert event.total == 1

    def test_missing_attribute(self, event):
        with pytest.raises(AttributeError):
            event.nothing_here

    def test_repr(self, event):
        assert "red:save" in repr(event)
