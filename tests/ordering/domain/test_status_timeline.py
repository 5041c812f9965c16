"""Tests for status timeline classification."""

from datetime import UTC, datetime, timedelta

import pytest
from ordering.order.status import PROGRESSION, OrderStatus
from ordering.order.timeline import classify_timeline

T0 = datetime(2025, 3, 1, 10, 0, tzinfo=UTC)


def _history(*statuses):
    return [{"status": s.value, "timestamp": T0 + timedelta(hours=i)} for i, s in enumerate(statuses)]


def _flags(timeline):
    return {e.status: ("completed" if e.completed else "current" if e.current else "pending") for e in timeline.entries}


class TestPrefixHistory:
    @pytest.mark.parametrize("current_index", range(len(PROGRESSION)))
    def test_prefix_history_marks_earlier_completed_and_later_pending(self, current_index):
        current = PROGRESSION[current_index]
        timeline = classify_timeline(current, _history(*PROGRESSION[:current_index]))

        for index, entry in enumerate(timeline.entries):
            if index < current_index:
                assert entry.completed
                assert not entry.current
            elif index == current_index:
                assert entry.current
            else:
                assert entry.pending

    def test_entries_cover_progression_in_order(self):
        timeline = classify_timeline("processing")
        assert [e.status for e in timeline.entries] == list(PROGRESSION)

    def test_timestamps_come_from_history(self):
        timeline = classify_timeline("paid", _history(OrderStatus.PENDING, OrderStatus.PAID))
        assert timeline.entries[0].timestamp == T0
        assert timeline.entries[1].timestamp == T0 + timedelta(hours=1)
        assert timeline.entries[2].timestamp is None


class TestIndexCompletion:
    def test_earlier_steps_complete_without_history(self):
        flags = _flags(classify_timeline(OrderStatus.SHIPPED, []))
        assert flags[OrderStatus.PENDING] == "completed"
        assert flags[OrderStatus.PROCESSING] == "completed"
        assert flags[OrderStatus.SHIPPED] == "current"
        assert flags[OrderStatus.DELIVERED] == "pending"

    def test_history_completes_a_later_step(self):
        # Entries seen in history count even past the current status
        timeline = classify_timeline(OrderStatus.PROCESSING, _history(OrderStatus.SHIPPED))
        assert timeline.entries[3].completed


class TestOffPathStatuses:
    @pytest.mark.parametrize(
        "status",
        [OrderStatus.CANCELLED, OrderStatus.REFUNDED, OrderStatus.CANCELLATION_REQUESTED],
    )
    def test_error_state_with_message(self, status):
        timeline = classify_timeline(status, [])
        assert timeline.is_error_state
        assert timeline.message
        assert not any(e.current for e in timeline.entries)

    def test_only_history_completes_steps(self):
        timeline = classify_timeline(
            OrderStatus.CANCELLED,
            _history(OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.CANCELLED),
        )
        flags = _flags(timeline)
        assert flags[OrderStatus.PENDING] == "completed"
        assert flags[OrderStatus.PAID] == "completed"
        assert flags[OrderStatus.PROCESSING] == "pending"
        assert flags[OrderStatus.SHIPPED] == "pending"

    def test_refunded_after_delivery(self):
        history = _history(*PROGRESSION, OrderStatus.REFUNDED)
        timeline = classify_timeline("refunded", history)
        assert all(e.completed for e in timeline.entries)
        assert timeline.is_error_state

    def test_normal_status_has_no_message(self):
        timeline = classify_timeline("shipped")
        assert not timeline.is_error_state
        assert timeline.message is None


class TestInputs:
    def test_unknown_history_statuses_are_ignored(self):
        timeline = classify_timeline("paid", [{"status": "teleported", "timestamp": T0}])
        assert [e.status for e in timeline.entries] == list(PROGRESSION)

    def test_unknown_current_status_raises(self):
        with pytest.raises(ValueError):
            classify_timeline("teleported")

    def test_accepts_objects_with_changed_at(self):
        class Change:
            status = "pending"
            changed_at = T0

        timeline = classify_timeline("paid", [Change()])
        assert timeline.entries[0].timestamp == T0

    def test_to_dict(self):
        data = classify_timeline("paid", _history(OrderStatus.PENDING)).to_dict()
        assert data["current_status"] == "paid"
        assert data["steps"][0] == {
            "status": "pending",
            "label": "Payment Pending",
            "completed": True,
            "current": False,
            "timestamp": T0.isoformat(),
        }
