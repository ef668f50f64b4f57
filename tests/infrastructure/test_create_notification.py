"""Tests for persisting notifications and publishing them on the feed."""

import pytest

from notification_hub.application.use_cases.notifications.events import (
    create_notification,
    emit_system_event,
)
from notification_hub.infrastructure.notifications import notification_feed
from notification_hub.infrastructure.repositories import NotificationRepository


@pytest.fixture
def feed_records():
    records = []
    listener = notification_feed.subscribe("user-1", records.append, lambda status: None)
    yield records
    listener.unsubscribe()


@pytest.mark.anyio
async def test_create_notification_persists_and_publishes(db_session, feed_records):
    saved = create_notification(
        db_session,
        "user-1",
        "Recharge approved",
        type="transaction",
        priority="high",
        metadata={"amount": "5 000 XOF"},
        link="/transactions/1",
    )

    assert NotificationRepository(db_session).get(saved.id) == saved
    assert len(feed_records) == 1
    record = feed_records[0]
    assert record["id"] == saved.id
    assert record["silent"] is False
    assert record["metadata"] == {"amount": "5 000 XOF"}
    assert record["created_at"] == saved.created_at.isoformat()


@pytest.mark.anyio
async def test_emit_system_event_publishes_silent_record(db_session, feed_records):
    emit_system_event(db_session, "user-1", target="balance", entity_id="acc-1")

    record = feed_records[0]
    assert record["silent"] is True
    assert (record["type"], record["action"], record["target"]) == (
        "data_refresh",
        "refresh",
        "balance",
    )


def test_create_notification_validates_input(db_session):
    with pytest.raises(ValueError):
        create_notification(db_session, "", "text")
    with pytest.raises(ValueError):
        create_notification(db_session, "user-1", "text", priority="critical")


def test_publishing_without_event_loop_is_skipped(db_session):
    saved = create_notification(db_session, "user-1", "offline")

    assert NotificationRepository(db_session).get(saved.id) is not None
