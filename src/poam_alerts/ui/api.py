"""
FastAPI routes for the notification center.

Exposes notification state, mutations, preferences, checks and event
reporting as JSON endpoints for the presentation layer.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict

from poam_alerts.core.models import Milestone, System, Task
from poam_alerts.engine import AlertingEngine
from poam_alerts.events.models import SystemEvent
from poam_alerts.notifications.models import Notification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ============================================================================
# Request models
# ============================================================================

class PreferencesUpdate(BaseModel):
    """Partial preference update; omitted flags keep their values."""

    model_config = ConfigDict(extra="forbid")

    deadline_alerts: Optional[bool] = None
    milestone_notifications: Optional[bool] = None
    overdue_warnings: Optional[bool] = None
    system_updates: Optional[bool] = None
    import_export_status: Optional[bool] = None
    desktop_notifications: Optional[bool] = None


class SystemSelection(BaseModel):
    """System to activate (null id clears the selection)."""

    id: Optional[str] = None
    name: str = ""


class TaskUpdatedEvent(BaseModel):
    """Task update report."""

    task: Task
    previous_status: Optional[str] = None


def get_engine(request: Request) -> AlertingEngine:
    return request.app.state.engine


def _notification_list(notifications: list[Notification]) -> list[dict]:
    return [n.to_dict() for n in notifications]


# ============================================================================
# Notifications
# ============================================================================

@router.get("/notifications")
async def list_notifications(
    request: Request,
    filter: str = Query("all", description="all, unread, or a notification type")
):
    """
    List notifications passing a view filter, newest first.

    Returns:
        Filtered notifications with the current unread count
    """
    center = get_engine(request).center
    try:
        center.set_filter(filter)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {
        "filter": center.filter,
        "unread_count": center.unread_count,
        "notifications": _notification_list(center.filtered_notifications),
    }


@router.get("/notifications/stats")
async def notification_stats(request: Request):
    """Get total, unread and per-type counts."""
    return get_engine(request).center.stats.to_dict()


@router.post("/notifications/read-all")
async def mark_all_read(request: Request):
    """Mark every notification as read."""
    center = get_engine(request).center
    center.mark_all_as_read()
    return {"unread_count": center.unread_count}


@router.post("/notifications/{notification_id}/read")
async def mark_read(request: Request, notification_id: str):
    """Mark one notification as read."""
    center = get_engine(request).center
    if not center.mark_as_read(notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"id": notification_id, "is_read": True, "unread_count": center.unread_count}


@router.delete("/notifications/{notification_id}")
async def remove_notification(request: Request, notification_id: str):
    """Delete one notification."""
    center = get_engine(request).center
    if not center.remove(notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"id": notification_id, "removed": True}


@router.delete("/notifications")
async def clear_notifications(request: Request):
    """Delete every notification."""
    center = get_engine(request).center
    center.clear_all()
    return {"total": center.stats.total}


# ============================================================================
# Preferences
# ============================================================================

@router.get("/preferences")
async def get_preferences(request: Request):
    """Get notification preferences."""
    return get_engine(request).center.preferences.to_dict()


@router.patch("/preferences")
async def update_preferences(request: Request, update: PreferencesUpdate):
    """Update some notification preferences."""
    center = get_engine(request).center
    preferences = center.update_preferences(update.model_dump(exclude_none=True))
    return preferences.to_dict()


# ============================================================================
# Systems and checks
# ============================================================================

@router.put("/system")
async def select_system(request: Request, selection: SystemSelection):
    """
    Switch the active system.

    A change of system runs one comprehensive check before responding.
    """
    engine = get_engine(request)
    system = System(id=selection.id, name=selection.name) if selection.id else None
    changed = await engine.switch_system(system)
    return {
        "system": selection.id,
        "changed": changed,
        "last_check_time": _isoformat(engine.scheduler.last_check_time),
    }


@router.post("/checks")
async def run_check(request: Request):
    """Run a comprehensive check of the active system."""
    engine = get_engine(request)
    stored = await engine.scheduler.perform_comprehensive_check()
    return {
        "system": engine.systems.current_system_id,
        "stored": len(stored),
        "notifications": _notification_list(stored),
        "last_check_time": _isoformat(engine.scheduler.last_check_time),
    }


@router.get("/checks/last")
async def last_check(request: Request):
    """Get the time of the last comprehensive check."""
    engine = get_engine(request)
    return {
        "system": engine.systems.current_system_id,
        "last_check_time": _isoformat(engine.scheduler.last_check_time),
        "running": engine.scheduler.is_checking(),
    }


# ============================================================================
# Event reporting
# ============================================================================

@router.post("/events/system")
async def report_system_event(request: Request, event: SystemEvent):
    """Report an import/export/backup/sync outcome or a system error."""
    notification = get_engine(request).reporter.notify_system_event(event)
    return {"notification": notification.to_dict() if notification else None}


@router.post("/events/task-created")
async def report_task_created(request: Request, task: Task):
    """Report a created task; its deadlines are checked immediately."""
    notification = await get_engine(request).reporter.notify_task_created(task)
    return {"notification": notification.to_dict() if notification else None}


@router.post("/events/task-updated")
async def report_task_updated(request: Request, event: TaskUpdatedEvent):
    """Report an updated task; its deadlines are re-checked immediately."""
    notification = await get_engine(request).reporter.notify_task_updated(
        event.task,
        previous_status=event.previous_status,
    )
    return {"notification": notification.to_dict() if notification else None}


@router.post("/events/milestone-completed")
async def report_milestone_completed(request: Request, milestone: Milestone):
    """Report a completed milestone."""
    notification = get_engine(request).reporter.notify_milestone_completed(milestone)
    return {"notification": notification.to_dict() if notification else None}


def _isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None
