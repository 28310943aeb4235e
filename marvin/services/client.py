import logging
from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import urlencode

from marvin.config.settings import Settings, get_settings
from marvin.execution.executor import RequestExecutor
from marvin.execution.http_client import Transport
from marvin.models.common import (
    AddEventRequest,
    Event,
    Goal,
    Habit,
    HabitUpdateResponse,
    KudosInfo,
    Profile,
    Reminder,
    RewardPointsOperation,
    SuccessResponse,
    UpdateHabitRequest,
)
from marvin.models.tasks import Category, Label, Project, Task
from marvin.models.tracking import TimeBlock, TrackedItem, TrackInfo, TrackResponse
from marvin.services.organization import OrganizationApi
from marvin.services.tasks import TasksApi
from marvin.services.time_tracking import TimeTrackingApi

logger = logging.getLogger(__name__)


class MarvinClient:
    """
    Клиент Amazing Marvin API (ограниченный токен X-API-Token).

    Методы сгруппированы по доменам (tasks, organization, time_tracking),
    самые частые продублированы на верхнем уровне. Все вызовы идут через
    один RequestExecutor, поэтому ретраи, таймауты и ошибки у них общие.

    Пример:
        client = MarvinClient(Settings(API_TOKEN="..."))
        items = await client.tasks.get_today_items()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[Transport] = None,
        executor: Optional[RequestExecutor] = None,
    ):
        self.settings = settings or get_settings()
        self.http = executor or RequestExecutor(self.settings, transport=transport)

        self.tasks = TasksApi(self.http)
        self.organization = OrganizationApi(self.http)
        self.time_tracking = TimeTrackingApi(self.http)

    # --- Auth ---

    async def test_credentials(self) -> str:
        """Проверка токена. При неверном токене - MarvinError 401 без ретраев."""
        return await self.http.post_text("/test")

    # --- Tasks (delegate) ---

    async def add_task(self, task, auto_complete: bool = True) -> Task:
        return await self.tasks.add_task(task, auto_complete)

    async def add_project(self, project, auto_complete: bool = True) -> Project:
        return await self.tasks.add_project(project, auto_complete)

    async def mark_done(self, item_id: str, time_zone_offset: Optional[int] = None) -> SuccessResponse:
        return await self.tasks.mark_done(item_id, time_zone_offset)

    async def get_today_items(self, date: Optional[str] = None) -> List[Union[Task, Project]]:
        return await self.tasks.get_today_items(date)

    async def get_due_items(self, by: Optional[str] = None) -> List[Union[Task, Project]]:
        return await self.tasks.get_due_items(by)

    async def get_children(self, parent_id: str, parent_id_header: Optional[str] = None) -> List[Union[Task, Project]]:
        return await self.tasks.get_children(parent_id, parent_id_header)

    # --- Organization (delegate) ---

    async def get_categories(self) -> List[Union[Category, Project]]:
        return await self.organization.get_categories()

    async def get_only_categories(self) -> List[Category]:
        return await self.organization.get_only_categories()

    async def get_only_projects(self) -> List[Project]:
        return await self.organization.get_only_projects()

    async def get_labels(self) -> List[Label]:
        return await self.organization.get_labels()

    # --- Time Tracking (delegate) ---

    async def get_tracked_item(self) -> Optional[TrackedItem]:
        return await self.time_tracking.get_tracked_item()

    async def start_tracking(self, task_id: str) -> TrackResponse:
        return await self.time_tracking.start_tracking(task_id)

    async def stop_tracking(self, task_id: str) -> TrackResponse:
        return await self.time_tracking.stop_tracking(task_id)

    async def get_tracks(self, task_ids: Sequence[str]) -> List[TrackInfo]:
        return await self.time_tracking.get_tracks(task_ids)

    async def get_today_time_blocks(self, date: str) -> List[TimeBlock]:
        return await self.time_tracking.get_today_time_blocks(date)

    # --- Profile / Kudos ---

    async def get_me(self) -> Profile:
        return Profile.model_validate(await self.http.get("/me"))

    async def get_kudos(self) -> KudosInfo:
        return KudosInfo.model_validate(await self.http.get("/kudos"))

    # --- Events ---

    async def add_event(self, event: Union[AddEventRequest, Dict[str, Any]]) -> Event:
        request = AddEventRequest.model_validate(event)
        return Event.model_validate(await self.http.post("/addEvent", request.to_payload()))

    # --- Reward points ---

    async def claim_reward_points(self, points: float, item_id: str, date: str) -> Profile:
        operation = RewardPointsOperation(op="CLAIM", points=points, item_id=item_id, date=date)
        return await self._reward_points("/claimRewardPoints", operation)

    async def unclaim_reward_points(self, item_id: str, date: str) -> Profile:
        operation = RewardPointsOperation(op="UNCLAIM", item_id=item_id, date=date)
        return await self._reward_points("/unclaimRewardPoints", operation)

    async def spend_reward_points(self, points: float, date: str) -> Profile:
        operation = RewardPointsOperation(op="SPEND", points=points, date=date)
        return await self._reward_points("/spendRewardPoints", operation)

    async def _reward_points(self, endpoint: str, operation: RewardPointsOperation) -> Profile:
        return Profile.model_validate(await self.http.post(endpoint, operation.to_payload()))

    # --- Habits ---

    async def record_habit(
        self,
        habit_id: str,
        time: int,
        value: float,
        update_db: bool = False,
    ) -> HabitUpdateResponse:
        """time - момент выполнения (мс с эпохи), value - записываемое значение."""
        request = UpdateHabitRequest(habit_id=habit_id, time=time, value=value, update_db=update_db)
        return HabitUpdateResponse.model_validate(await self.http.post("/updateHabit", request.to_payload()))

    async def undo_habit(self, habit_id: str, update_db: bool = False) -> HabitUpdateResponse:
        request = UpdateHabitRequest(habit_id=habit_id, undo=True, update_db=update_db)
        return HabitUpdateResponse.model_validate(await self.http.post("/updateHabit", request.to_payload()))

    async def rewrite_habit_history(
        self,
        habit_id: str,
        history: Sequence[float],
        update_db: bool = False,
    ) -> SuccessResponse:
        request = UpdateHabitRequest(habit_id=habit_id, history=list(history), update_db=update_db)
        return SuccessResponse.model_validate(await self.http.post("/updateHabit", request.to_payload()))

    async def get_habit(self, habit_id: str) -> Habit:
        data = await self.http.get(f"/habit?{urlencode({'id': habit_id})}")
        return Habit.model_validate(data)

    async def get_habits(self) -> List[Habit]:
        return [Habit.model_validate(item) for item in await self.http.get("/habits")]

    # --- Goals ---

    async def get_goals(self) -> List[Goal]:
        return [Goal.model_validate(item) for item in await self.http.get("/goals")]

    # --- Reminders ---

    async def set_reminders(self, reminders: Sequence[Union[Reminder, Dict[str, Any]]]) -> str:
        payload = [Reminder.model_validate(r).to_payload() for r in reminders]
        logger.debug(f"Setting {len(payload)} reminder(s)")
        return await self.http.post_text("/reminder/set", {"reminders": payload})

    async def delete_reminders(self, reminder_ids: Sequence[str]) -> str:
        return await self.http.post_text("/reminder/delete", {"reminderIds": list(reminder_ids)})
