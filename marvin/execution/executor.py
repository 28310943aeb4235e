import asyncio
import json
import logging
import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from marvin.config.headers import DEFAULT_USER_AGENT, get_headers
from marvin.core.exceptions import ClientConfigError, MarvinError, to_marvin_error
from marvin.execution.http_client import HttpxTransport, Transport, TransportRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")

Parser = Callable[[httpx.Response], T]


def parse_json(response: httpx.Response) -> Any:
    """Пустое или битое тело -> json.JSONDecodeError (не ретраится)."""
    return response.json()


def parse_text(response: httpx.Response) -> str:
    return response.text


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> Optional[int]:
    """
    Retry-After -> миллисекунды.
    Поддерживает число секунд ("2", "1.5") и HTTP-date. Мусор -> None.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        seconds = float(value)
    except ValueError:
        seconds = None

    if seconds is not None:
        if not math.isfinite(seconds):
            return None
        return max(0, math.floor(seconds * 1000))

    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if retry_at is None:
        return None

    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0, math.floor((retry_at - now).total_seconds() * 1000))


class RequestExecutor:
    """
    Выполняет один логический запрос с политикой Resilience:
    таймаут на попытку, ретраи 5xx/429/сетевых сбоев, экспоненциальная задержка
    с приоритетом Retry-After. Состояние между вызовами не меняется,
    поэтому один executor можно использовать из многих корутин одновременно.
    """

    def __init__(
        self,
        settings: Any,
        transport: Optional[Transport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        api_token = getattr(settings, "API_TOKEN", "") or ""
        if not api_token.strip():
            raise ClientConfigError("API token is required and cannot be empty")
        if settings.TIMEOUT_MS <= 0:
            raise ClientConfigError("Timeout must be greater than 0")
        if settings.MAX_RETRIES < 0:
            raise ClientConfigError("Retries must be 0 or greater")
        if settings.RETRY_DELAY_MS <= 0:
            raise ClientConfigError("Retry delay must be greater than 0")

        self.settings = settings
        self.api_token = api_token
        self.base_url = settings.BASE_URL
        self.timeout_ms = settings.TIMEOUT_MS
        self.max_retries = int(settings.MAX_RETRIES)
        self.retry_delay_ms = settings.RETRY_DELAY_MS
        self.user_agent = getattr(settings, "USER_AGENT", DEFAULT_USER_AGENT)

        self.transport: Transport = transport or HttpxTransport(
            timeout_seconds=self.timeout_ms / 1000,
            connect_timeout=getattr(settings, "HTTP_TIMEOUT_CONNECT", 10.0),
            proxy_url=getattr(settings, "proxy", None),
        )
        self._sleep = sleep
        self._backoff = wait_exponential(multiplier=self.retry_delay_ms / 1000, exp_base=2)

    # --- Public API ---

    async def get(self, endpoint: str, extra_headers: Optional[Mapping[str, str]] = None) -> Any:
        return await self.request(endpoint, method="GET", extra_headers=extra_headers)

    async def get_text(self, endpoint: str, extra_headers: Optional[Mapping[str, str]] = None) -> str:
        return await self.request(endpoint, method="GET", extra_headers=extra_headers, parser=parse_text)

    async def post(
        self,
        endpoint: str,
        body: Any = None,
        extra_headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        return await self.request(endpoint, method="POST", body=body, extra_headers=extra_headers)

    async def post_text(
        self,
        endpoint: str,
        body: Any = None,
        extra_headers: Optional[Mapping[str, str]] = None,
    ) -> str:
        return await self.request(
            endpoint, method="POST", body=body, extra_headers=extra_headers, parser=parse_text
        )

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        extra_headers: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        parser: Parser = parse_json,
    ) -> Any:
        """
        Выполняет запрос до успеха, неретраибельной ошибки или исчерпания попыток.

        Ретраим: 5xx, 429 и сетевые сбои (status 0).
        Fail Fast: прочие 4xx и ошибки парсера (тело не разобрано - отдаем как есть).
        """
        if not endpoint:
            raise ValueError("Endpoint must be a non-empty path")

        method = method.upper()
        url = f"{self.base_url}{endpoint}"
        request = TransportRequest(
            method=method,
            headers=get_headers(self.api_token, self.user_agent, extra_headers, headers),
            content=json.dumps(body) if body is not None else None,
        )

        retrier = AsyncRetrying(
            retry=retry_if_exception(self._should_retry),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=self._compute_delay,
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True
        )

        try:
            async for attempt in retrier:
                with attempt:
                    response = await self._attempt(url, request, endpoint)
                    return parser(response)
        except MarvinError as e:
            logger.error(f"{method} {endpoint} failed: {e} (status={e.status})")
            raise

        # Недостижимо: каждая ветка цикла либо возвращает результат, либо бросает.
        raise MarvinError.build(
            message="Request failed after all retries",
            status=0,
            status_text="Retry Exhausted",
            endpoint=endpoint,
            method=method,
        )

    # --- Internals ---

    async def _attempt(self, url: str, request: TransportRequest, endpoint: str) -> httpx.Response:
        """Одна попытка. Возвращает успешный ответ или бросает MarvinError."""
        attempt_timeout = self.timeout_ms / 1000
        logger.debug(f"{request.method} {url}")

        # Таймаут определяем по незавершенной задаче, а не по типу исключения:
        # TimeoutError самого транспорта должен сохранить свое сообщение.
        task = asyncio.ensure_future(self.transport(url, request))
        try:
            done, _ = await asyncio.wait({task}, timeout=attempt_timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if not done:
            task.cancel()
            await asyncio.wait({task})
            logger.warning(f"{request.method} {endpoint} aborted after {self.timeout_ms} ms")
            raise MarvinError.build(
                message=f"Request aborted: no response within {self.timeout_ms:g} ms",
                status=0,
                status_text="Network Error",
                endpoint=endpoint,
                method=request.method,
            )

        try:
            response = task.result()
        except Exception as e:
            logger.warning(f"{request.method} {endpoint} transport error: {e.__class__.__name__}")
            raise to_marvin_error(e, endpoint, request.method) from e

        if response.is_success:
            return response

        status_text = response.reason_phrase or "Unknown Error"
        raise MarvinError.build(
            message=f"HTTP {response.status_code}: {status_text}",
            status=response.status_code,
            status_text=status_text,
            endpoint=endpoint,
            method=request.method,
            retry_after_ms=parse_retry_after(response.headers.get("retry-after")),
        )

    @staticmethod
    def _should_retry(e: BaseException) -> bool:
        # Ошибки парсера и прочие исключения не ретраим.
        if not isinstance(e, MarvinError):
            return False
        # 429 - единственный ретраибельный 4xx.
        if e.is_client_error() and e.status != 429:
            return False
        return True

    def _compute_delay(self, retry_state: RetryCallState) -> float:
        """Retry-After сервера важнее нашего backoff (retry_delay * 2^attempt)."""
        error = retry_state.outcome.exception() if retry_state.outcome else None
        retry_after_ms = getattr(error, "retry_after_ms", None)
        if retry_after_ms is not None:
            return retry_after_ms / 1000
        return self._backoff(retry_state)
