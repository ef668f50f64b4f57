from datetime import timedelta

import pytest

from notification_hub.application.use_cases.notifications import (
    NotificationHistoryService,
    search_notifications,
)
from notification_hub.domain.entities import NotificationSearchFilters

from conftest import BASE_TIME, make_notification


@pytest.fixture
def cache():
    return [
        make_notification("a", minutes=1, text="Recharge approved", type="transaction"),
        make_notification("b", minutes=3, text="Password changed", category="security"),
        make_notification(
            "c", minutes=2, text="Weekly report", type="system", priority="low", read=True
        ),
        make_notification("d", minutes=4, text="New message", category="Recharge-desk"),
    ]


def test_query_is_case_insensitive_over_text_type_and_category(cache):
    result = search_notifications(cache, NotificationSearchFilters(query="RECHARGE"))

    assert [n.id for n in result] == ["d", "a"]


def test_query_matches_type(cache):
    result = search_notifications(cache, NotificationSearchFilters(query="system"))

    assert [n.id for n in result] == ["c"]


def test_filters_combine_with_and(cache):
    filters = NotificationSearchFilters(priority="low", read=True, type="system")

    assert [n.id for n in search_notifications(cache, filters)] == ["c"]
    assert search_notifications(cache, NotificationSearchFilters(priority="low", read=False)) == []


def test_date_range_is_inclusive(cache):
    filters = NotificationSearchFilters(
        date_from=BASE_TIME + timedelta(minutes=2),
        date_to=BASE_TIME + timedelta(minutes=3),
    )

    assert [n.id for n in search_notifications(cache, filters)] == ["b", "c"]


def test_search_is_pure_and_sorted_newest_first(cache):
    snapshot = list(cache)
    filters = NotificationSearchFilters()

    first = search_notifications(cache, filters)
    second = search_notifications(cache, filters)

    assert first == second
    assert [n.id for n in first] == ["d", "b", "c", "a"]
    assert cache == snapshot


@pytest.mark.anyio
async def test_history_paginates_with_offset(gateway):
    gateway.seed(*(make_notification(f"n{index}", minutes=index) for index in range(5)))
    service = NotificationHistoryService(gateway, page_size=2)

    page = await service.history("user-1", page=2)

    assert [n.id for n in page.items] == ["n2", "n1"]
    assert page.total == 5
    assert page.page == 2
    assert page.page_size == 2
    assert page.error is None


@pytest.mark.anyio
async def test_history_failure_returns_empty_page_with_error(gateway):
    gateway.fail_fetch = True
    service = NotificationHistoryService(gateway)

    page = await service.history("user-1", page=1, page_size=10)

    assert page.items == []
    assert page.total == 0
    assert page.error == "Could not load notification history"


@pytest.mark.anyio
async def test_history_without_user_is_empty(gateway):
    page = await NotificationHistoryService(gateway).history(None)

    assert page.items == []
    assert page.error is None
