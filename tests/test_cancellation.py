from __future__ import annotations

import asyncio

import pytest

from liveplaya.cancellation import CancellationToken
from liveplaya.exceptions import FetchCancelledError


def test_cancel_is_idempotent() -> None:
    token = CancellationToken()
    assert not token.cancelled
    token.cancel()
    token.cancel()
    assert token.cancelled
    with pytest.raises(FetchCancelledError):
        token.raise_if_cancelled()


@pytest.mark.asyncio
async def test_run_returns_result_when_not_cancelled() -> None:
    token = CancellationToken()

    async def work() -> int:
        await asyncio.sleep(0)
        return 42

    assert await token.run(work()) == 42


@pytest.mark.asyncio
async def test_run_propagates_awaitable_errors() -> None:
    token = CancellationToken()

    async def work() -> int:
        raise ValueError("nope")

    with pytest.raises(ValueError, match="nope"):
        await token.run(work())


@pytest.mark.asyncio
async def test_run_aborts_pending_work_on_cancel() -> None:
    token = CancellationToken()
    finished: list[bool] = []
    aborted = asyncio.Event()

    async def slow() -> None:
        try:
            await asyncio.sleep(10)
            finished.append(True)
        except asyncio.CancelledError:
            aborted.set()
            raise

    runner = asyncio.create_task(token.run(slow()))
    await asyncio.sleep(0.01)
    token.cancel()

    with pytest.raises(FetchCancelledError):
        await runner
    await asyncio.wait_for(aborted.wait(), timeout=1.0)
    assert finished == []


@pytest.mark.asyncio
async def test_run_on_cancelled_token_raises_immediately() -> None:
    token = CancellationToken()
    token.cancel()

    async def work() -> int:
        return 1

    coro = work()
    with pytest.raises(FetchCancelledError):
        await token.run(coro)
    coro.close()


@pytest.mark.asyncio
async def test_wait_returns_once_cancelled() -> None:
    token = CancellationToken()
    waiter = asyncio.create_task(token.wait())
    await asyncio.sleep(0)
    assert not waiter.done()

    token.cancel()
    await asyncio.wait_for(waiter, timeout=1.0)
