import inspect
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncGenerator, Awaitable, Callable, Dict, Optional, Union
from urllib.parse import urlparse, urlunparse

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportRequest:
    """Описание одного HTTP запроса, которое получает транспорт."""
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[Union[str, bytes]] = None


# Транспорт: (url, request) -> httpx.Response.
# Подменяется в тестах и в нестандартных окружениях.
Transport = Callable[[str, TransportRequest], Awaitable[httpx.Response]]


class HttpxTransport:
    """
    Транспорт по умолчанию на базе httpx.AsyncClient.
    Клиент создается на каждый вызов: пул соединений между вызовами не держим.
    """

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        connect_timeout: float = 10.0,
        proxy_url: Optional[str] = None,
        mock_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = httpx.Timeout(timeout_seconds, connect=min(connect_timeout, timeout_seconds))
        self.proxy_url = proxy_url
        # Низкоуровневый транспорт httpx (например, httpx.MockTransport в тестах).
        self._mock_transport = mock_transport

        if self.proxy_url:
            self._validate_library_capability()

    def _validate_library_capability(self):
        """Гарантирует, что httpx поддерживает нужный API (proxy=...)."""
        sig = inspect.signature(httpx.AsyncClient)
        if 'proxy' not in sig.parameters:
            raise RuntimeError(
                "Installed httpx version does not support 'proxy' argument. "
                "Update dependencies to httpx>=0.26.0"
            )

    @staticmethod
    def _mask_proxy_url(url: str) -> str:
        """Безопасная маскировка пароля в URL."""
        if not url:
            return "Direct"
        try:
            parsed = urlparse(url)
            if parsed.password:
                safe_netloc = f"{parsed.username}:***@{parsed.hostname}"
                if parsed.port:
                    safe_netloc += f":{parsed.port}"
                parsed = parsed._replace(netloc=safe_netloc)
            return urlunparse(parsed)
        except ValueError:
            return "Invalid-URL"

    @asynccontextmanager
    async def client(self) -> AsyncGenerator[httpx.AsyncClient, None]:
        kwargs = {
            "timeout": self.timeout,
            "follow_redirects": True,
        }
        if self.proxy_url:
            kwargs["proxy"] = self.proxy_url
        if self._mock_transport is not None:
            kwargs["transport"] = self._mock_transport

        try:
            async with httpx.AsyncClient(**kwargs) as client:
                yield client
        except httpx.HTTPError as e:
            safe_proxy = self._mask_proxy_url(self.proxy_url or "")
            logger.warning(f"HTTP transport failed. Proxy: {safe_proxy}. Error class: {e.__class__.__name__}")
            raise

    async def __call__(self, url: str, request: TransportRequest) -> httpx.Response:
        async with self.client() as client:
            return await client.request(
                request.method,
                url,
                headers=request.headers,
                content=request.content,
            )
