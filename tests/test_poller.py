import httpx
import pytest

from services.status_poller import PaymentStatusPoller, PollOutcome


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def scripted(responses):
    """Mock transport that replays `responses` in order, repeating the last one."""
    calls = []

    def handler(request):
        calls.append(request)
        item = responses[min(len(calls), len(responses)) - 1]
        if isinstance(item, Exception):
            raise item
        status, body = item
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler), calls


def make_poller(transport, clock=None, **kwargs):
    clock = clock or FakeClock()
    sleeps = []

    async def sleep(seconds):
        sleeps.append(seconds)
        clock.now += seconds

    client = httpx.AsyncClient(transport=transport, base_url="http://store.test")
    poller = PaymentStatusPoller(client, "memo-1", sleep=sleep, clock=clock, **kwargs)
    return poller, sleeps


async def test_polls_until_completed():
    pending = (200, {"payment_status": "pending", "template_name": "Landing Kit"})
    transport, calls = scripted([pending, pending, (200, {"payment_status": "completed", "template_name": "Landing Kit"})])
    poller, sleeps = make_poller(transport)

    result = await poller.run()

    assert result.outcome is PollOutcome.COMPLETED
    assert result.template_name == "Landing Kit"
    assert result.attempts == 3
    assert sleeps == [3.0, 3.0]
    assert calls[0].url.path == "/api/orders/verify"
    assert calls[0].url.params["memo"] == "memo-1"


async def test_failed_is_terminal():
    transport, calls = scripted([(200, {"payment_status": "failed", "template_name": None})])
    poller, _ = make_poller(transport)

    result = await poller.run()

    assert result.outcome is PollOutcome.FAILED
    assert len(calls) == 1


async def test_not_found_reported_after_grace():
    transport, calls = scripted([(404, {"error": "order_not_found"})])
    poller, _ = make_poller(transport)

    result = await poller.run()

    assert result.outcome is PollOutcome.NOT_FOUND
    assert result.attempts == 10
    assert len(calls) == 10


async def test_late_visible_order_resets_not_found_grace():
    missing = (404, {"error": "order_not_found"})
    pending = (200, {"payment_status": "pending"})
    script = [missing] * 9 + [pending] + [missing] * 9 + [(200, {"payment_status": "completed"})]
    transport, calls = scripted(script)
    poller, _ = make_poller(transport)

    result = await poller.run()

    assert result.outcome is PollOutcome.COMPLETED
    assert len(calls) == 20


async def test_transient_errors_are_silent():
    script = [
        httpx.ConnectError("boom"),
        (500, {"error": "internal_server_error"}),
        (200, {"payment_status": "completed"}),
    ]
    transport, calls = scripted(script)
    poller, _ = make_poller(transport)

    result = await poller.run()

    assert result.outcome is PollOutcome.COMPLETED
    assert len(calls) == 3


async def test_gives_up_after_max_duration_without_terminal_state():
    transport, calls = scripted([(200, {"payment_status": "pending"})])
    poller, sleeps = make_poller(transport)

    result = await poller.run()

    assert result.outcome is PollOutcome.UNRESOLVED
    # 300s budget at 3s intervals
    assert len(calls) == 101
    assert sum(sleeps) == pytest.approx(300.0)


async def test_custom_interval_and_duration():
    transport, calls = scripted([(200, {"payment_status": "pending"})])
    poller, sleeps = make_poller(transport, interval=1.0, max_duration=5.0)

    result = await poller.run()

    assert result.outcome is PollOutcome.UNRESOLVED
    assert len(calls) == 6
    assert sleeps == [1.0] * 5


async def test_stop_ends_loop_cooperatively():
    transport, calls = scripted([(200, {"payment_status": "pending"})])
    poller, _ = make_poller(transport)

    async def stop_after_two(seconds):
        if len(calls) == 2:
            poller.stop()

    poller._sleep = stop_after_two

    result = await poller.run()

    assert result.outcome is PollOutcome.UNRESOLVED
    assert len(calls) == 2


async def test_unknown_memo_against_app_is_not_found_on_tenth_poll(client, auth_headers):
    sleeps = []

    async def sleep(seconds):
        sleeps.append(seconds)

    client.headers.update(auth_headers())
    poller = PaymentStatusPoller(client, "never-issued", sleep=sleep, clock=FakeClock())

    result = await poller.run()

    assert result.outcome is PollOutcome.NOT_FOUND
    assert result.attempts == 10
    assert len(sleeps) == 9


async def test_resolved_order_against_app_stays_resolved(client, auth_headers, make_template):
    template = await make_template()
    client.headers.update(auth_headers())
    order = (await client.post("/api/orders", json={"item_id": template.id})).json()
    await client.post("/api/hotpay/webhook", json={"memo": order["memo"], "status": "SUCCESS", "near_trx": "abc"})

    async def sleep(seconds):
        pass

    first = await PaymentStatusPoller(client, order["memo"], sleep=sleep, clock=FakeClock()).run()
    await client.post("/api/hotpay/webhook", json={"memo": order["memo"], "status": "FAILED"})
    second = await PaymentStatusPoller(client, order["memo"], sleep=sleep, clock=FakeClock()).run()

    assert first.outcome is PollOutcome.COMPLETED
    assert second.outcome is PollOutcome.COMPLETED
    assert first.attempts == second.attempts == 1
