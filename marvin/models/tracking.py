from typing import List, Literal, Optional

from pydantic import Field

from marvin.models.common import MarvinItem, MarvinModel


class TrackedItem(MarvinModel):
    id: str = Field(..., alias="_id")
    db: Optional[str] = None
    title: str


class TrackRequest(MarvinModel):
    task_id: str
    action: Literal["START", "STOP"]


class TrackResponse(MarvinModel):
    start_id: Optional[str] = None
    start_times: List[int] = Field(default_factory=list)
    stop_id: Optional[str] = None
    stop_times: List[int] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)


class TrackInfo(MarvinModel):
    task_id: str
    times: List[int] = Field(default_factory=list)


class TimeBlock(MarvinItem):
    title: str
    date: str
    time: str
    duration: str
    is_section: Optional[bool] = None
    note: Optional[str] = None
