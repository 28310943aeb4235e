from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlencode

from marvin.execution.executor import RequestExecutor
from marvin.models.common import SuccessResponse
from marvin.models.tasks import (
    AddProjectRequest,
    AddTaskRequest,
    MarkDoneRequest,
    Project,
    Task,
    parse_item,
)


def _auto_complete_headers(auto_complete: bool) -> Dict[str, str]:
    return {} if auto_complete else {"X-Auto-Complete": "false"}


class TasksApi:
    """Задачи и проекты: создание, завершение, выборки на день/по сроку/по родителю."""

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    async def add_task(
        self,
        task: Union[AddTaskRequest, Dict[str, Any]],
        auto_complete: bool = True,
    ) -> Task:
        """
        Создает задачу. auto_complete=False отключает серверный разбор
        сокращений в заголовке (например, "+today", "#project").
        """
        request = AddTaskRequest.model_validate(task)
        data = await self.executor.post("/addTask", request.to_payload(), _auto_complete_headers(auto_complete))
        return Task.model_validate(data)

    async def add_project(
        self,
        project: Union[AddProjectRequest, Dict[str, Any]],
        auto_complete: bool = True,
    ) -> Project:
        request = AddProjectRequest.model_validate(project)
        data = await self.executor.post("/addProject", request.to_payload(), _auto_complete_headers(auto_complete))
        return Project.model_validate(data)

    async def mark_done(self, item_id: str, time_zone_offset: Optional[int] = None) -> SuccessResponse:
        request = MarkDoneRequest(item_id=item_id, time_zone_offset=time_zone_offset)
        data = await self.executor.post("/markDone", request.to_payload())
        return SuccessResponse.model_validate(data)

    async def get_today_items(self, date: Optional[str] = None) -> List[Union[Task, Project]]:
        """Задачи и проекты на сегодня (или на date в формате YYYY-MM-DD)."""
        if date:
            endpoint = f"/todayItems?{urlencode({'date': date})}"
            headers = {"X-Date": date}
        else:
            endpoint, headers = "/todayItems", {}
        data = await self.executor.get(endpoint, headers)
        return [parse_item(item) for item in data]

    async def get_due_items(self, by: Optional[str] = None) -> List[Union[Task, Project]]:
        endpoint = f"/dueItems?{urlencode({'by': by})}" if by else "/dueItems"
        data = await self.executor.get(endpoint)
        return [parse_item(item) for item in data]

    async def get_children(
        self,
        parent_id: str,
        parent_id_header: Optional[str] = None,
    ) -> List[Union[Task, Project]]:
        endpoint = f"/children?{urlencode({'parentId': parent_id})}"
        headers = {"X-Parent-Id": parent_id_header} if parent_id_header else {}
        data = await self.executor.get(endpoint, headers)
        return [parse_item(item) for item in data]
