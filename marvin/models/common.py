from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MarvinModel(BaseModel):
    """
    Базовая модель для данных Marvin API.
    Поля в snake_case, на проводе camelCase. Неизвестные поля сохраняются.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_payload(self) -> Dict[str, Any]:
        """JSON-тело запроса: алиасы, без пустых полей."""
        return self.model_dump(by_alias=True, exclude_none=True)


class MarvinItem(MarvinModel):
    id: str = Field(..., alias="_id")
    rev: Optional[str] = Field(None, alias="_rev")
    created_at: Optional[int] = None
    updated_at: Optional[int] = None


class ApiErrorInfo(BaseModel):
    """Структурированная ошибка вызова (одна на каждую неудачную попытку)."""
    model_config = ConfigDict(frozen=True)

    message: str
    status: int = Field(..., ge=0, description="HTTP статус или 0, если ответа не было")
    status_text: str = Field(..., min_length=1)
    endpoint: str
    method: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    retry_after_ms: Optional[int] = Field(None, ge=0, description="Подсказка сервера (Retry-After)")


class SuccessResponse(MarvinModel):
    success: bool


class HabitUpdateResponse(MarvinModel):
    success: bool
    new_value: Optional[float] = None


class Profile(MarvinModel):
    user_id: str
    email: str
    parent_email: Optional[str] = None
    email_confirmed: Optional[bool] = None
    billing_period: Optional[str] = None
    paid_through: Optional[str] = None
    marvin_points: Optional[float] = None
    reward_points_earned: Optional[float] = None
    reward_points_spent: Optional[float] = None
    reward_points_earned_today: Optional[float] = None
    reward_points_spent_today: Optional[float] = None
    tomatoes: Optional[int] = None
    tomatoes_today: Optional[int] = None
    tracking: Optional[str] = None
    tracking_since: Optional[int] = None

    @property
    def reward_points_balance(self) -> float:
        return (self.reward_points_earned or 0) - (self.reward_points_spent or 0)


class KudosInfo(MarvinModel):
    kudos: int
    level: int
    kudos_remaining: int


class RewardPointsOperation(MarvinModel):
    """CLAIM / UNCLAIM / SPEND. points не нужен для UNCLAIM, item_id не нужен для SPEND."""
    op: str = Field(..., pattern="^(CLAIM|UNCLAIM|SPEND)$")
    date: str
    points: Optional[float] = None
    item_id: Optional[str] = None


class Event(MarvinItem):
    title: str
    start: str
    length: int
    note: Optional[str] = None
    is_all_day: Optional[bool] = None
    parent_id: Optional[str] = None
    label_ids: Optional[List[str]] = None


class AddEventRequest(MarvinModel):
    title: str
    start: str
    length: int = Field(..., ge=0, description="Длительность в миллисекундах")
    note: Optional[str] = None


class Goal(MarvinItem):
    title: str
    status: Optional[str] = None
    note: Optional[str] = None
    parent_id: Optional[str] = None
    importance: Optional[int] = None
    difficulty: Optional[int] = None
    committed: Optional[bool] = None
    has_end: Optional[bool] = None
    due_date: Optional[str] = None
    color: Optional[str] = None


class Habit(MarvinItem):
    title: str
    period: Optional[str] = None
    target: Optional[float] = None
    is_positive: Optional[bool] = None
    record_type: Optional[str] = None
    units: Optional[str] = None
    note: Optional[str] = None
    parent_id: Optional[str] = None
    history: Optional[List[float]] = None


class Reminder(MarvinModel):
    time: int
    offset: int
    reminder_id: str
    type: str = Field(..., pattern="^(T|M|DT|DP|t)$")
    title: str
    snooze: int
    auto_snooze: bool
    can_track: bool


class UpdateHabitRequest(MarvinModel):
    habit_id: str
    time: Optional[int] = None
    value: Optional[float] = None
    update_db: Optional[bool] = Field(None, alias="updateDB")
    undo: Optional[bool] = None
    history: Optional[List[float]] = None
