from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import Field

from marvin.models.common import MarvinItem, MarvinModel


class Task(MarvinItem):
    title: str
    done: bool = False
    parent_id: Optional[str] = None
    day: Optional[str] = None
    due_date: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    first_scheduled: Optional[str] = None
    rank: Optional[float] = None
    completed_at: Optional[int] = None
    duration: Optional[int] = None
    times: Optional[List[int]] = None
    is_starred: Optional[Union[bool, int]] = None
    is_frogged: Optional[Union[bool, int]] = None
    label_ids: Optional[List[str]] = None
    time_estimate: Optional[int] = None
    note: Optional[str] = None
    backburner: Optional[bool] = None
    reward_points: Optional[float] = None


class Project(MarvinItem):
    title: str
    type: Literal["project"] = "project"
    parent_id: Optional[str] = None
    done: Optional[bool] = None
    day: Optional[str] = None
    due_date: Optional[str] = None
    priority: Optional[Literal["low", "mid", "high"]] = None
    label_ids: Optional[List[str]] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    note: Optional[str] = None
    time_estimate: Optional[int] = None


class Category(MarvinItem):
    title: str
    type: Optional[str] = "category"
    parent_id: Optional[str] = None
    rank: Optional[float] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    note: Optional[str] = None


class Label(MarvinItem):
    title: str
    group_id: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    show_as: Optional[Literal["text", "icon", "both"]] = None
    is_action: Optional[bool] = None
    is_hidden: Optional[bool] = None


class _NewItemRequest(MarvinModel):
    """Общие поля для создания задач и проектов."""
    title: str
    done: bool = False
    day: Optional[str] = None
    parent_id: Optional[str] = None
    label_ids: Optional[List[str]] = None
    first_scheduled: Optional[str] = None
    rank: Optional[float] = None
    note: Optional[str] = None
    due_date: Optional[str] = None
    time_estimate: Optional[int] = None
    is_reward: Optional[bool] = None
    is_frogged: Optional[Union[bool, int]] = None
    planned_week: Optional[str] = None
    planned_month: Optional[str] = None
    reward_points: Optional[float] = None
    backburner: Optional[bool] = None
    review_date: Optional[str] = None
    time_zone_offset: Optional[int] = None


class AddTaskRequest(_NewItemRequest):
    is_starred: Optional[Union[bool, int]] = None


class AddProjectRequest(_NewItemRequest):
    priority: Optional[Literal["low", "mid", "high"]] = None


class MarkDoneRequest(MarvinModel):
    item_id: str
    time_zone_offset: Optional[int] = Field(None, description="Смещение таймзоны в минутах")


def parse_item(data: Dict[str, Any]) -> Union[Task, Project]:
    """Сервер отдает задачи и проекты вперемешку; проект отличается полем type."""
    if data.get("type") == "project":
        return Project.model_validate(data)
    return Task.model_validate(data)


def parse_category_or_project(data: Dict[str, Any]) -> Union[Category, Project]:
    if data.get("type") == "project":
        return Project.model_validate(data)
    return Category.model_validate(data)
