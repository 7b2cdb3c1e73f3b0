import json

import httpx
import pytest

from voiceforge.config import Settings
from voiceforge.schemas.app_settings import StreamerbotActions
from voiceforge.services.streamerbot import StreamerbotActuator


class Recorder:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append({"url": str(request.url), "body": json.loads(request.content)})
        return httpx.Response(self.status_code, json={"success": True})


def make_actuator(recorder, actions: StreamerbotActions, **overrides) -> StreamerbotActuator:
    values = {"streamerbot_url": "http://bot.local:7474"}
    values.update(overrides)
    return StreamerbotActuator(
        Settings(_env_file=None, **values),
        lambda: actions,
        transport=httpx.MockTransport(recorder),
    )


ACTIONS = StreamerbotActions(
    show_action_id="show-1", hide_action_id="hide-1", refund_action_id="refund-1"
)


@pytest.mark.asyncio
async def test_show_and_hide_trigger_actions() -> None:
    recorder = Recorder()
    actuator = make_actuator(recorder, ACTIONS)

    await actuator.show("hello chat")
    await actuator.hide()

    assert recorder.requests == [
        {
            "url": "http://bot.local:7474/DoAction",
            "body": {"action": {"id": "show-1"}, "args": {"text": "hello chat"}},
        },
        {
            "url": "http://bot.local:7474/DoAction",
            "body": {"action": {"id": "hide-1"}, "args": {}},
        },
    ]


@pytest.mark.asyncio
async def test_unconfigured_overlay_is_a_no_op() -> None:
    recorder = Recorder()
    actuator = make_actuator(recorder, StreamerbotActions())

    await actuator.show("hello")
    await actuator.hide()

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_refund_sends_redemption_details() -> None:
    recorder = Recorder()
    actuator = make_actuator(recorder, ACTIONS)

    accepted = await actuator.refund("redeem-1", "reward-1", "viewer", "Content blocked: spam")

    assert accepted is True
    assert recorder.requests[0]["body"] == {
        "action": {"id": "refund-1"},
        "args": {
            "redemptionId": "redeem-1",
            "rewardId": "reward-1",
            "username": "viewer",
            "reason": "Content blocked: spam",
        },
    }


@pytest.mark.asyncio
async def test_refund_needs_both_ids_and_an_action() -> None:
    recorder = Recorder()

    missing_ids = await make_actuator(recorder, ACTIONS).refund(None, "reward-1", "v", "x")
    no_action = await make_actuator(recorder, StreamerbotActions()).refund(
        "redeem-1", "reward-1", "v", "x"
    )

    assert missing_ids is False
    assert no_action is False
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_refund_reports_rejected_action() -> None:
    recorder = Recorder(status_code=500)

    accepted = await make_actuator(recorder, ACTIONS).refund("r", "w", "v", "x")

    assert accepted is False


@pytest.mark.asyncio
async def test_transport_failure_is_logged_not_raised(caplog) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    actuator = StreamerbotActuator(
        Settings(_env_file=None, streamerbot_url="http://bot.local:7474"),
        lambda: ACTIONS,
        transport=httpx.MockTransport(handler),
    )

    await actuator.show("hello")
    accepted = await actuator.refund("r", "w", "v", "x")

    assert accepted is False
    assert "Streamer.bot action show-1 failed" in caplog.text
