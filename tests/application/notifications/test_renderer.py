import asyncio

import pytest

from notification_hub.application.ports import PERMISSION_DEFAULT, PERMISSION_DENIED
from notification_hub.application.use_cases.notifications import (
    AppSignals,
    NativeNotificationRenderer,
    NotificationPolicy,
    TemplateCatalog,
)
from notification_hub.application.use_cases.notifications.signals import NAVIGATE
from notification_hub.domain.entities import NotificationPreferences

from conftest import FakeNotifier, make_notification


def _renderer(notifier, *, signals=None, policy=None, auto=5.0, urgent=10.0):
    return NativeNotificationRenderer(
        notifier,
        TemplateCatalog(),
        signals or AppSignals(),
        app_name="SecureTrans",
        default_icon="/vite.svg",
        auto_dismiss_seconds=auto,
        urgent_auto_dismiss_seconds=urgent,
        policy=policy,
    )


@pytest.mark.anyio
async def test_granted_permission_displays_with_notification_tag(notifier):
    renderer = _renderer(notifier)

    assert await renderer.render(make_notification("n1", text="Recharge approved")) is True

    options = notifier.shown[0].options
    assert options.tag == "n1"
    assert options.title == "SecureTrans"
    assert options.body == "Recharge approved"
    assert options.icon == "/vite.svg"
    assert options.vibrate == [200, 100, 200]
    assert options.require_interaction is False


@pytest.mark.anyio
async def test_template_drives_title_body_icon_and_actions(notifier):
    renderer = _renderer(notifier)
    notification = make_notification(
        "n1",
        text="fallback",
        template="transaction_created",
        metadata={"amount": "10 000 XOF"},
    )

    await renderer.render(notification)

    options = notifier.shown[0].options
    assert options.title == "💰 Nouvelle Transaction"
    assert options.body == "Une nouvelle transaction de 10 000 XOF a été créée"
    assert options.icon == "/icons/transaction.png"
    assert [action["action"] for action in options.actions] == ["view", "dismiss"]


@pytest.mark.anyio
async def test_template_without_metadata_uses_text(notifier):
    renderer = _renderer(notifier)

    await renderer.render(make_notification("n1", text="Plain", template="system_update"))

    assert notifier.shown[0].options.body == "Plain"


@pytest.mark.parametrize(
    "overrides",
    [
        {"priority": "urgent"},
        {"category": "validation"},
        {"type": "transaction_validation"},
        {"template": "transaction_validation"},
    ],
)
@pytest.mark.anyio
async def test_urgent_and_validation_require_interaction(notifier, overrides):
    renderer = _renderer(notifier)

    await renderer.render(make_notification("n1", **overrides))

    assert notifier.shown[0].options.require_interaction is True


@pytest.mark.anyio
async def test_default_permission_is_requested_then_displayed(notifier):
    notifier._permission = PERMISSION_DEFAULT
    renderer = _renderer(notifier)

    assert await renderer.render(make_notification("n1")) is True
    assert notifier.permission_requests == 1
    assert len(notifier.shown) == 1


@pytest.mark.anyio
async def test_denied_request_is_never_repeated():
    notifier = FakeNotifier(permission=PERMISSION_DEFAULT, request_result=PERMISSION_DENIED)
    renderer = _renderer(notifier)

    assert await renderer.render(make_notification("n1")) is False
    assert await renderer.render(make_notification("n2")) is False

    assert notifier.permission_requests == 1
    assert renderer.permission_denied is True
    assert notifier.shown == []


@pytest.mark.anyio
async def test_unsupported_platform_and_display_errors_are_swallowed():
    assert await _renderer(FakeNotifier(supported=False)).render(make_notification("a")) is False

    failing = FakeNotifier()
    failing.fail_show = True
    assert await _renderer(failing).render(make_notification("b")) is False


@pytest.mark.anyio
async def test_prompt_auto_closes_after_delay(notifier):
    renderer = _renderer(notifier, auto=0.01, urgent=0.05)

    await renderer.render(make_notification("n1"))
    await renderer.render(make_notification("n2", priority="urgent"))
    await asyncio.sleep(0.03)

    assert notifier.shown[0].closed is True
    assert notifier.shown[1].closed is False
    assert renderer.open_tags == ["n2"]


@pytest.mark.anyio
async def test_same_tag_replaces_previous_prompt(notifier):
    renderer = _renderer(notifier)

    await renderer.render(make_notification("n1"))
    await renderer.render(make_notification("n1", text="updated"))

    assert notifier.shown[0].closed is True
    assert renderer.open_tags == ["n1"]
    renderer.close_all()
    assert notifier.shown[1].closed is True


@pytest.mark.anyio
async def test_click_focuses_navigates_and_closes(notifier):
    signals = AppSignals()
    navigations = []
    signals.connect(NAVIGATE, navigations.append)
    renderer = _renderer(notifier, signals=signals)

    await renderer.render(make_notification("n1", link="/transactions/7"))
    notifier.shown[0].options.on_click()

    assert notifier.focus_calls == 1
    assert navigations == [{"link": "/transactions/7", "notification_id": "n1"}]
    assert notifier.shown[0].closed is True


@pytest.mark.anyio
async def test_click_without_link_does_not_navigate(notifier):
    signals = AppSignals()
    navigations = []
    signals.connect(NAVIGATE, navigations.append)
    renderer = _renderer(notifier, signals=signals)

    await renderer.render(make_notification("n1"))
    notifier.shown[0].options.on_click()

    assert navigations == []


@pytest.mark.anyio
async def test_policy_suppresses_and_strips_vibration_and_sound(notifier):
    policy = NotificationPolicy(
        NotificationPreferences(transactions=False, vibration=False, sound=False)
    )
    renderer = _renderer(notifier, policy=policy)

    assert await renderer.render(make_notification("t", type="transaction")) is False
    assert await renderer.render(make_notification("g", type="general", priority="urgent")) is True

    options = notifier.shown[0].options
    assert options.vibrate == []
    assert options.silent is True


@pytest.mark.anyio
async def test_policy_delay_defers_the_prompt(notifier):
    policy = NotificationPolicy()
    policy.recommended_delay = lambda notification, now=None: 0.01
    renderer = _renderer(notifier, policy=policy)

    assert await renderer.render(make_notification("n1")) is True
    assert notifier.shown == []
    assert renderer.pending_tags == ["n1"]

    await asyncio.sleep(0.03)

    assert [handle.options.tag for handle in notifier.shown] == ["n1"]
    assert renderer.pending_tags == []


@pytest.mark.anyio
async def test_close_all_cancels_deferred_prompts(notifier):
    renderer = _renderer(notifier, policy=NotificationPolicy())

    await renderer.render(make_notification("n1", priority="low"))
    renderer.close_all()
    await asyncio.sleep(0)

    assert renderer.pending_tags == []
    assert notifier.shown == []
