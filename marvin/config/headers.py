from typing import Dict, Mapping, Optional

AUTH_HEADER = "X-API-Token"

# Базовые заголовки для всех запросов к API.
BASE_HEADERS = {
    "Content-Type": "application/json",
}

DEFAULT_USER_AGENT = "MarvinClient/1.0"


def get_headers(
    api_token: str,
    user_agent: str = DEFAULT_USER_AGENT,
    *overrides: Optional[Mapping[str, str]],
) -> Dict[str, str]:
    """
    Собирает заголовки запроса.
    Каждый следующий набор из overrides перекрывает предыдущие при совпадении ключа.
    """
    headers = BASE_HEADERS.copy()
    headers[AUTH_HEADER] = api_token
    headers["User-Agent"] = user_agent

    for extra in overrides:
        if extra:
            headers.update(extra)

    return headers
