"""
Settings API routes.

Endpoints:
- GET /api/settings/email - Current reminder email settings (raw stored values)
- PUT /api/settings/email - Update template id and days-before-expiry (admin)
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from core.database import get_connection, get_transaction
from core.notifications.context import DAYS_BEFORE_KEY, TEMPLATE_ID_KEY
from core.queries.settings import get_settings_by_keys, upsert_setting
from web_api.auth import get_current_user, require_admin

router = APIRouter(prefix="/api/settings", tags=["settings"])


class EmailSettingsRequest(BaseModel):
    """Request body for updating reminder email settings."""

    model_config = ConfigDict(populate_by_name=True)

    template_id: int = Field(alias="templateId", ge=1)
    days_before: int = Field(alias="daysBefore", ge=0)


@router.get("/email")
async def get_email_settings(
    user: dict = Depends(get_current_user),
) -> dict[str, Any]:
    """
    Return the stored template id and days-before-expiry.

    Values are returned as stored (strings), or null when never set;
    the expiry job applies its own defaults.
    """
    async with get_connection() as conn:
        raw = await get_settings_by_keys(conn, [TEMPLATE_ID_KEY, DAYS_BEFORE_KEY])

    return {
        "templateId": raw.get(TEMPLATE_ID_KEY),
        "daysBefore": raw.get(DAYS_BEFORE_KEY),
    }


@router.put("/email")
async def update_email_settings(
    request: EmailSettingsRequest,
    admin: dict = Depends(require_admin),
) -> dict[str, Any]:
    """Upsert both settings in one transaction."""
    async with get_transaction() as conn:
        await upsert_setting(conn, TEMPLATE_ID_KEY, str(request.template_id))
        await upsert_setting(conn, DAYS_BEFORE_KEY, str(request.days_before))

    return {
        "message": "Email settings updated successfully",
        "templateId": str(request.template_id),
        "daysBefore": str(request.days_before),
    }
