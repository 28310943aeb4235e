import logging
from typing import Any, List, Optional, Sequence
from urllib.parse import urlencode

import httpx

from marvin.execution.executor import RequestExecutor, parse_json
from marvin.models.tracking import TimeBlock, TrackedItem, TrackInfo, TrackRequest, TrackResponse

logger = logging.getLogger(__name__)


def _parse_optional_json(response: httpx.Response) -> Any:
    """Пустое тело -> None, битое тело -> json.JSONDecodeError."""
    if not response.text.strip():
        return None
    return parse_json(response)


class TimeTrackingApi:
    """Трекинг времени и тайм-блоки."""

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    async def get_tracked_item(self) -> Optional[TrackedItem]:
        """
        Текущая отслеживаемая задача.
        Когда ничего не отслеживается, сервер отдает 200 с пустым телом -> None.
        """
        data = await self.executor.request("/trackedItem", parser=_parse_optional_json)
        if not data:
            logger.debug("Empty /trackedItem body: nothing is being tracked")
            return None
        return TrackedItem.model_validate(data)

    async def start_tracking(self, task_id: str) -> TrackResponse:
        return await self._track(task_id, "START")

    async def stop_tracking(self, task_id: str) -> TrackResponse:
        return await self._track(task_id, "STOP")

    async def _track(self, task_id: str, action: str) -> TrackResponse:
        request = TrackRequest(task_id=task_id, action=action)
        data = await self.executor.post("/track", request.to_payload())
        return TrackResponse.model_validate(data)

    async def get_tracks(self, task_ids: Sequence[str]) -> List[TrackInfo]:
        data = await self.executor.post("/tracks", {"taskIds": list(task_ids)})
        return [TrackInfo.model_validate(item) for item in data]

    async def get_today_time_blocks(self, date: str) -> List[TimeBlock]:
        endpoint = f"/todayTimeBlocks?{urlencode({'date': date})}"
        data = await self.executor.get(endpoint, {"X-Date": date})
        return [TimeBlock.model_validate(item) for item in data]
