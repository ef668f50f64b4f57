from datetime import datetime, timezone

from notification_hub.application.use_cases.notifications import (
    classify_record,
    count_unread,
    is_silent_record,
)
from notification_hub.domain.entities import Notification, SystemEvent

from conftest import make_notification


def test_silent_record_becomes_system_event_with_defaults():
    event = classify_record({"id": "n1", "silent": True})

    assert isinstance(event, SystemEvent)
    assert event.type == "data_refresh"
    assert event.action == "refresh"
    assert event.target == "unknown"
    assert event.data is None
    assert event.timestamp is not None


def test_silent_record_keeps_target_and_entity():
    event = classify_record(
        {
            "silent": True,
            "type": "data_refresh",
            "action": "update",
            "target": "balance",
            "entity_id": "acc-9",
        }
    )

    assert isinstance(event, SystemEvent)
    assert (event.type, event.action, event.target) == ("data_refresh", "update", "balance")
    assert event.data == {"entity_id": "acc-9"}


def test_record_without_silent_flag_is_visible():
    assert is_silent_record({"id": "n1", "text": "hello"}) is False

    notification = classify_record({"id": "n1", "user_id": "u", "text": "hello"})

    assert isinstance(notification, Notification)
    assert notification.silent is False


def test_only_true_silent_flag_counts_as_silent():
    assert is_silent_record({"silent": "true"}) is False
    assert is_silent_record({"silent": 1}) is False
    assert is_silent_record({"silent": True}) is True


def test_visible_record_is_normalized():
    notification = classify_record(
        {
            "id": 42,
            "user_id": "u1",
            "text": "Recharge approved",
            "priority": "critical",
            "read": 0,
            "metadata": None,
            "created_at": "2024-05-01T10:30:00Z",
            "category": "transaction",
        }
    )

    assert notification.id == "42"
    assert notification.priority == "normal"
    assert notification.read is False
    assert notification.metadata == {}
    assert notification.category == "transaction"
    assert notification.created_at == datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)


def test_unparseable_timestamp_falls_back_to_now():
    before = datetime.now(timezone.utc)
    notification = classify_record({"id": "n1", "text": "x", "created_at": "yesterday"})

    assert notification.created_at >= before


def test_count_unread_ignores_read_and_silent_entries():
    notifications = [
        make_notification("a"),
        make_notification("b", read=True),
        make_notification("c", silent=True),
        make_notification("d"),
    ]

    assert count_unread(notifications) == 2
