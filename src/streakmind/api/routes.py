"""API routes."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, Header, HTTPException
from pydantic import ValidationError
from streakmind.core.config import settings
from streakmind.core.logging import logger
from streakmind.models.schemas import (
    ActivityCreate, ActivityModel, ActivityUpdate, ChatMessageModel,
    MemoryClearRequest, MemoryRemoveItemRequest, MessageRequest, MessageResponse, StatsResponse,
)
from streakmind.services.habit_state import UNSET
from streakmind.services.memory import MemoryFieldError
from streakmind.services.tracker import HabitTracker, create_tracker

router = APIRouter()

_tracker: Optional[HabitTracker] = None


def get_tracker() -> HabitTracker:
    """Shared tracker backed by the configured data folder."""
    global _tracker
    if _tracker is None:
        _tracker = create_tracker()
    return _tracker


def verify_auth(x_api_key: Optional[str] = Header(None)):
    """Verify API key if configured."""
    if settings.auth.api_key and x_api_key != settings.auth.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")
    return True


@router.get("/health")
def health_check(tracker: HabitTracker = Depends(get_tracker)):
    """Health check endpoint."""
    return {
        "status": "ok",
        "llm_status": tracker.llm_health(),
        "data_path": str(settings.data_path),
        "data_path_exists": settings.data_path.exists(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ===== Messages =====

@router.get("/messages", response_model=List[ChatMessageModel], dependencies=[Depends(verify_auth)])
def list_messages(tracker: HabitTracker = Depends(get_tracker)):
    """Conversation transcript, oldest first."""
    return [message.to_dict() for message in tracker.get_messages()]


@router.post("/messages", response_model=MessageResponse, dependencies=[Depends(verify_auth)])
def send_message(req: MessageRequest, tracker: HabitTracker = Depends(get_tracker)):
    """Send a chat message: log a habit, run a command, or just talk."""
    try:
        return tracker.ingest(req.content).to_dict()
    except Exception as e:
        logger.error(f"Messages endpoint error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/messages", dependencies=[Depends(verify_auth)])
def clear_messages(tracker: HabitTracker = Depends(get_tracker)):
    """Delete the whole transcript. The activity log is untouched."""
    count = tracker.clear_messages()
    return {"message": "All messages deleted successfully", "deleted": count}


@router.delete("/messages/{message_id}", dependencies=[Depends(verify_auth)])
def delete_message(message_id: str, tracker: HabitTracker = Depends(get_tracker)):
    """Delete one transcript message."""
    if not tracker.delete_message(message_id):
        raise HTTPException(status_code=404, detail="Message not found")
    return {"message": "Message deleted successfully"}


# ===== Stats & logs =====

@router.get("/stats", response_model=StatsResponse, dependencies=[Depends(verify_auth)])
def get_stats(tracker: HabitTracker = Depends(get_tracker)):
    """Points, streaks, badges, recent logs and activities."""
    return tracker.get_stats()


@router.delete("/logs/{entry_id}", dependencies=[Depends(verify_auth)])
def delete_log_entry(entry_id: str, tracker: HabitTracker = Depends(get_tracker)):
    """Delete a single log entry."""
    entry = tracker.delete_log_entry(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Log entry not found")
    return {"message": f"Deleted {entry.activity} entry from {entry.date}"}


# ===== Activities =====

@router.post("/activities", dependencies=[Depends(verify_auth)])
def create_activity(req: ActivityCreate, tracker: HabitTracker = Depends(get_tracker)):
    """Create an activity."""
    activity = tracker.create_activity(
        name=req.name.strip(),
        custom_points=req.custom_points,
        visualization_type=req.visualization_type,
        description=req.description,
    )
    if activity is None:
        raise HTTPException(status_code=400, detail="Activity already exists")
    return {
        "activity": ActivityModel(**activity.to_dict()),
        "message": f'Created activity "{activity.name}"',
    }


@router.put("/activities/{name}", dependencies=[Depends(verify_auth)])
def update_activity(name: str, req: ActivityUpdate, tracker: HabitTracker = Depends(get_tracker)):
    """Update an activity. Renaming carries its logs and streak along."""
    fields = req.model_fields_set
    updated = tracker.update_activity(
        name,
        name=req.name.strip() if req.name else None,
        visualization_type=req.visualization_type,
        custom_points=req.custom_points if "custom_points" in fields else UNSET,
        description=req.description if "description" in fields else UNSET,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Activity not found or new name already in use")
    return {"message": "Activity updated successfully"}


@router.delete("/activities/{name}", dependencies=[Depends(verify_auth)])
def delete_activity(name: str, tracker: HabitTracker = Depends(get_tracker)):
    """Delete an activity, its streak and all of its logs."""
    if not tracker.delete_activity(name):
        raise HTTPException(status_code=404, detail="Activity not found")
    return {"message": f'Deleted activity "{name}"'}


# ===== Settings =====

@router.get("/settings", dependencies=[Depends(verify_auth)])
def get_settings(tracker: HabitTracker = Depends(get_tracker)):
    return tracker.get_settings().model_dump()


@router.put("/settings", dependencies=[Depends(verify_auth)])
def update_settings(updates: Dict[str, Any] = Body(...), tracker: HabitTracker = Depends(get_tracker)):
    """Partial settings update."""
    try:
        updated = tracker.update_settings(updates)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))
    return {"message": "Settings updated successfully", "settings": updated.model_dump()}


@router.post("/settings/reset", dependencies=[Depends(verify_auth)])
def reset_settings(tracker: HabitTracker = Depends(get_tracker)):
    defaults = tracker.reset_settings()
    return {"message": "Settings reset to defaults", "settings": defaults.model_dump()}


# ===== Memory =====

@router.get("/memory", dependencies=[Depends(verify_auth)])
def get_memory(tracker: HabitTracker = Depends(get_tracker)):
    """What StreakMind remembers about the user."""
    return tracker.get_memory().to_dict()


@router.post("/memory/clear", dependencies=[Depends(verify_auth)])
def clear_memory(req: MemoryClearRequest, tracker: HabitTracker = Depends(get_tracker)):
    """Reset memory sections or categories."""
    try:
        memory = tracker.clear_memory(req.fields)
    except MemoryFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": "Memory cleared successfully", "memory": memory.to_dict()}


@router.post("/memory/remove-item", dependencies=[Depends(verify_auth)])
def remove_memory_item(req: MemoryRemoveItemRequest, tracker: HabitTracker = Depends(get_tracker)):
    """Forget one remembered item."""
    try:
        removed = tracker.remove_memory_item(req.category, req.item)
    except MemoryFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not removed:
        raise HTTPException(status_code=404, detail="Memory item not found")
    return {"message": f'Removed "{req.item}" from {req.category}'}
