"""Shared test fixtures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import httpx
import pytest

from marvin.execution.executor import RequestExecutor

BASE_URL = "https://api.test"


@dataclass
class MockSettings:
    API_TOKEN: str = "test-token"
    BASE_URL: str = BASE_URL
    TIMEOUT_MS: float = 1000
    MAX_RETRIES: int = 3
    RETRY_DELAY_MS: float = 100


class SleepRecorder:
    """Заменяет asyncio.sleep: записывает задержки (мс) и не ждет."""

    def __init__(self) -> None:
        self.delays_ms: List[int] = []

    async def __call__(self, seconds: float) -> None:
        self.delays_ms.append(round(seconds * 1000))


def make_response(
    status_code: int,
    json: Any = None,
    text: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Response:
    req = httpx.Request("GET", BASE_URL)
    if json is not None:
        return httpx.Response(status_code, json=json, headers=headers, request=req)
    if text is not None:
        return httpx.Response(status_code, text=text, headers=headers, request=req)
    return httpx.Response(status_code, headers=headers, request=req)


@pytest.fixture()
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def transport() -> AsyncMock:
    return AsyncMock()


@pytest.fixture()
def make_executor(transport, sleep_recorder):
    def _make(**overrides: Any) -> RequestExecutor:
        return RequestExecutor(MockSettings(**overrides), transport=transport, sleep=sleep_recorder)

    return _make
