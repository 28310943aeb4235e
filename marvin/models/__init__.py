from marvin.models.common import (
    ApiErrorInfo,
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
from marvin.models.tasks import (
    AddProjectRequest,
    AddTaskRequest,
    Category,
    Label,
    MarkDoneRequest,
    Project,
    Task,
)
from marvin.models.tracking import TimeBlock, TrackedItem, TrackInfo, TrackResponse

__all__ = [
    "ApiErrorInfo",
    "AddEventRequest",
    "AddProjectRequest",
    "AddTaskRequest",
    "Category",
    "Event",
    "Goal",
    "Habit",
    "HabitUpdateResponse",
    "KudosInfo",
    "Label",
    "MarkDoneRequest",
    "Profile",
    "Project",
    "Reminder",
    "RewardPointsOperation",
    "SuccessResponse",
    "Task",
    "TimeBlock",
    "TrackedItem",
    "TrackInfo",
    "TrackResponse",
    "UpdateHabitRequest",
]
