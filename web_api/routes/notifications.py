"""
Expiry notification API routes.

All endpoints require admin authentication.

Endpoints:
- POST /api/notifications/expiry/run - Send expiry reminders now
- GET /api/notifications/expiry/last-run - Result of the latest scheduled or manual run
"""

from typing import Any

from fastapi import APIRouter, Depends, Request

from core.notifications.expiry import run_expiry_notifications
from web_api.auth import require_admin

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _get_scheduler(request: Request):
    """The process scheduler, if main.py started one."""
    return getattr(request.app.state, "expiry_scheduler", None)


@router.post("/expiry/run")
async def run_expiry_now(
    request: Request,
    admin: dict = Depends(require_admin),
) -> dict[str, Any]:
    """
    Run the expiry reminder job immediately.

    Goes through the process scheduler when there is one so the result
    shows up in last-run. A run already in flight makes this one "skipped".
    """
    scheduler = _get_scheduler(request)
    if scheduler is not None:
        result = await scheduler.run_now()
    else:
        result = await run_expiry_notifications()

    return result.to_dict()


@router.get("/expiry/last-run")
async def get_last_expiry_run(
    request: Request,
    admin: dict = Depends(require_admin),
) -> dict[str, Any]:
    """Return the latest run result, or a null status if nothing ran yet."""
    scheduler = _get_scheduler(request)
    if scheduler is None or scheduler.last_result is None:
        return {"status": None}

    return scheduler.last_result.to_dict()
