"""Routes Rappels / Reminder API routes (appelées par le planificateur externe / called by the external scheduler)."""

from datetime import date

from fastapi import APIRouter, Depends

from app.api.deps import get_engine, require_admin
from app.models.user import User
from app.schemas.common import DateStr
from app.schemas.interval import DueReminderRead
from app.services.engine import SchedulingEngine

router = APIRouter()


@router.get("/due", response_model=list[DueReminderRead])
async def list_due_reminders(
    today: DateStr | None = None,
    user: User = Depends(require_admin),
    engine: SchedulingEngine = Depends(get_engine),
):
    """Rappels de reprise dus / Due rebooking reminders. L'envoi reste externe / Delivery is external."""
    return await engine.reminders.find_due_reminders(today or date.today().isoformat())
