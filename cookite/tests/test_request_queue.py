import asyncio

import pytest

from cookite.client.queue import RequestQueue


pytestmark = pytest.mark.asyncio


async def test_operations_start_at_least_min_interval_apart():
    queue = RequestQueue(min_interval=0.1)
    loop = asyncio.get_running_loop()
    starts = []

    async def operation(n):
        starts.append((n, loop.time()))
        return n

    results = await asyncio.gather(*(queue.enqueue(lambda n=n: operation(n)) for n in range(3)))

    assert results == [0, 1, 2]
    assert [n for n, _ in starts] == [0, 1, 2]
    gaps = [b - a for (_, a), (_, b) in zip(starts, starts[1:])]
    assert all(gap >= 0.1 - 1e-3 for gap in gaps)


async def test_operations_never_overlap():
    queue = RequestQueue(min_interval=0)
    running = 0
    peak = 0

    async def operation():
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1

    await asyncio.gather(*(queue.enqueue(operation) for _ in range(4)))

    assert peak == 1


async def test_failure_is_reported_only_to_its_caller():
    queue = RequestQueue(min_interval=0)

    async def boom():
        raise RuntimeError("HTTP 400")

    async def ok():
        return "ok"

    first, second = await asyncio.gather(queue.enqueue(boom), queue.enqueue(ok), return_exceptions=True)

    assert isinstance(first, RuntimeError)
    assert second == "ok"
