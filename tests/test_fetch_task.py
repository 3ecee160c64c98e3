from __future__ import annotations

import asyncio

from bloodbridge.services.api_client import ApiError
from bloodbridge.services.fetch_task import FetchState, FetchTask


def test_task_starts_pending():
    async def loader():
        return [1]

    task = FetchTask(loader, "numbers")
    assert task.state is FetchState.PENDING
    assert task.is_pending
    assert task.result_or([]) == []


def test_resolved_task_exposes_data():
    async def loader():
        return [{"email": "a@x.com"}]

    task = FetchTask(loader, "donors")
    result = asyncio.run(task.run())

    assert result == [{"email": "a@x.com"}]
    assert task.state is FetchState.RESOLVED
    assert task.error is None
    assert task.result_or([]) == [{"email": "a@x.com"}]


def test_rejected_task_keeps_error_and_never_raises():
    async def loader():
        raise ApiError(503, "down")

    task = FetchTask(loader, "donors")
    result = asyncio.run(task.run())

    assert result is None
    assert task.state is FetchState.REJECTED
    assert isinstance(task.error, ApiError)
    assert task.result_or(["fallback"]) == ["fallback"]
    assert "rejected" in repr(task)
