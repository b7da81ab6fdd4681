from __future__ import annotations

import asyncio

import httpx
import pytest

from elusync.adapters.http_resilience import (
    ResilienceConfig,
    ResilientClient,
    RetryablePayloadError,
    RetryPolicy,
    backoff_delay,
)


@pytest.mark.parametrize(
    ("attempt", "expected"),
    [(0, 0.0), (1, 1.0), (2, 2.0), (3, 4.0), (10, 30.0)],
)
def test_backoff_delay_doubles_until_cap(attempt: int, expected: float) -> None:
    assert backoff_delay(attempt, factor=1.0, maximum=30.0) == expected


def _client(
    handler: httpx.MockTransport, *, hooks: tuple[object, ...] = (), total: int = 2
) -> tuple[ResilientClient, list[float]]:
    slept: list[float] = []

    async def sleep(delay: float) -> None:
        slept.append(delay)

    config = ResilienceConfig(
        name="test",
        retry=RetryPolicy(total=total, backoff_factor=0.5),
        response_hooks=hooks,  # type: ignore[arg-type]
    )
    client = ResilientClient(config, sleep=sleep)
    client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        transport=handler, event_hooks={"response": list(hooks)}
    )
    return client, slept


async def _reject_busy(response: httpx.Response) -> None:
    await response.aread()
    if response.text == "busy":
        raise RetryablePayloadError("busy", response=response)


def test_payload_retry_uses_policy_backoff() -> None:
    bodies = iter(["busy", "busy", "ok"])
    transport = httpx.MockTransport(lambda _request: httpx.Response(200, text=next(bodies)))
    client, slept = _client(transport, hooks=(_reject_busy,))

    async def run() -> str:
        async with client:
            response = await client.get("https://example.invalid/")
            return response.text

    assert asyncio.run(run()) == "ok"
    assert slept == [0.5, 1.0]


def test_payload_retry_gives_up() -> None:
    transport = httpx.MockTransport(lambda _request: httpx.Response(200, text="busy"))
    client, slept = _client(transport, hooks=(_reject_busy,), total=1)

    async def run() -> None:
        async with client:
            await client.get("https://example.invalid/")

    with pytest.raises(RetryablePayloadError):
        asyncio.run(run())
    assert slept == [0.5]
