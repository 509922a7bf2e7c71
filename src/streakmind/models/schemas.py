"""Pydantic schemas."""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from streakmind.services.activities import VisualizationType


class MessageRequest(BaseModel):
    """Chat message request schema."""
    content: str = Field(..., min_length=1)


class LogEntryModel(BaseModel):
    """Log entry as returned by the API."""
    id: str
    activity: str
    amount: float
    unit: str
    date: str
    message: str
    timestamp: str
    points: int


class MessageResponse(BaseModel):
    """Chat message response schema."""
    reply: str
    action: str
    log_entry: Optional[LogEntryModel] = None
    points_awarded: int = 0
    streak_updated: bool = False
    current_streak: Optional[int] = None
    activity_created: Optional[str] = None
    command_action: Optional[str] = None


class BadgeModel(BaseModel):
    name: str
    icon: str
    description: str


class ActivityModel(BaseModel):
    id: str
    name: str
    custom_points_per_unit: Optional[float] = None
    visualization_type: VisualizationType
    created_at: str
    description: Optional[str] = None


class StatsResponse(BaseModel):
    """Stats response schema."""
    total_points: int
    streaks: Dict[str, int]
    badges: List[BadgeModel]
    logs: List[LogEntryModel]
    activities: Dict[str, ActivityModel]


class ActivityCreate(BaseModel):
    """Activity creation schema."""
    name: str = Field(..., min_length=1, max_length=100)
    custom_points: Optional[float] = Field(None, ge=0)
    visualization_type: Optional[VisualizationType] = None
    description: Optional[str] = None


class ActivityUpdate(BaseModel):
    """Activity update schema. Omitted fields are left unchanged; custom_points=null clears the override."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    custom_points: Optional[float] = Field(None, ge=0)
    visualization_type: Optional[VisualizationType] = None
    description: Optional[str] = None


class ChatMessageModel(BaseModel):
    id: str
    role: str
    message: str
    timestamp: str



class MemoryClearRequest(BaseModel):
    """Memory sections or categories to reset, or ["all"]."""
    fields: List[str] = Field(..., min_length=1)


class MemoryRemoveItemRequest(BaseModel):
    """One remembered item to forget."""
    category: str
    item: str = Field(..., min_length=1)
