from datetime import datetime
from typing import Optional

from marvin.models.common import ApiErrorInfo


class MarvinBaseError(Exception):
    """Базовый класс ошибок клиента."""
    pass


class ClientConfigError(MarvinBaseError, ValueError):
    """Невалидная конфигурация клиента (токен, таймаут, ретраи). Падаем при создании."""
    pass


class MarvinError(MarvinBaseError):
    """
    Единая ошибка вызова API.

    status == 0 означает, что ответа не было вообще (сеть, DNS, таймаут).
    Объект неизменяем: поля доступны только на чтение.
    """

    def __init__(self, info: ApiErrorInfo):
        self._info = info
        super().__init__(info.message)

    def __reduce__(self):
        # args исключения - только текст; для copy/pickle восстанавливаем из info.
        return (self.__class__, (self._info,))

    @classmethod
    def build(
        cls,
        message: str,
        status: int,
        status_text: str,
        endpoint: str,
        method: str,
        retry_after_ms: Optional[int] = None,
    ) -> "MarvinError":
        return cls(ApiErrorInfo(
            message=message,
            status=status,
            status_text=status_text,
            endpoint=endpoint,
            method=method,
            retry_after_ms=retry_after_ms,
        ))

    @property
    def info(self) -> ApiErrorInfo:
        return self._info

    @property
    def message(self) -> str:
        return self._info.message

    @property
    def status(self) -> int:
        return self._info.status

    @property
    def status_text(self) -> str:
        return self._info.status_text

    @property
    def endpoint(self) -> str:
        return self._info.endpoint

    @property
    def method(self) -> str:
        return self._info.method

    @property
    def timestamp(self) -> datetime:
        return self._info.timestamp

    @property
    def retry_after_ms(self) -> Optional[int]:
        return self._info.retry_after_ms

    def is_client_error(self) -> bool:
        """4xx"""
        return 400 <= self.status < 500

    def is_server_error(self) -> bool:
        """5xx"""
        return self.status >= 500

    def is_retryable(self) -> bool:
        """5xx или сетевой сбой (status 0)."""
        return self.is_server_error() or self.status == 0

    def __repr__(self) -> str:
        return (
            f"MarvinError(status={self.status}, status_text={self.status_text!r}, "
            f"method={self.method!r}, endpoint={self.endpoint!r})"
        )


def to_marvin_error(fault: object, endpoint: str, method: str) -> MarvinError:
    """
    Нормализует любой пойманный сбой в MarvinError:
    - уже MarvinError -> возвращаем как есть;
    - исключение с текстом -> status 0, "Network Error";
    - все остальное -> status 0, "Unknown Error".
    """
    if isinstance(fault, MarvinError):
        return fault

    if isinstance(fault, BaseException) and str(fault):
        return MarvinError.build(
            message=str(fault),
            status=0,
            status_text="Network Error",
            endpoint=endpoint,
            method=method,
        )

    return MarvinError.build(
        message="Unknown error",
        status=0,
        status_text="Unknown Error",
        endpoint=endpoint,
        method=method,
    )
