from __future__ import annotations

import io
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile

from reminderbot.api.v1.schemas import (
    AppointmentListSchema,
    AppointmentSchema,
    AppointmentUploadResponseSchema,
    ClearResponseSchema,
)
from reminderbot.application.exceptions import SpreadsheetFormatError
from reminderbot.application.use_cases.import_appointments import (
    STATUS_EXISTING,
    STATUS_NEW,
    STATUS_RESCHEDULED,
)
from reminderbot.wiring.dependencies import Container, get_container

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/upload", response_model=AppointmentUploadResponseSchema)
def upload_appointments(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    container: Container = Depends(get_container),
):
    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="No file uploaded")

    try:
        result = container.import_appointments.execute(io.BytesIO(content))
    except SpreadsheetFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        logger.warning("Unreadable appointments upload", extra={"reason": str(e)})
        raise HTTPException(status_code=400, detail=f"Could not read spreadsheet: {e}")

    if result.genuinely_new:
        background_tasks.add_task(container.send_hook_messages.execute, result.genuinely_new)

    return AppointmentUploadResponseSchema(
        message=result.summary,
        count=len(result.merged),
        new=result.count(STATUS_NEW),
        rescheduled_preserved=result.count(STATUS_RESCHEDULED),
        existing_preserved=result.count(STATUS_EXISTING),
        hooks_scheduled_for=len(result.genuinely_new),
        persisted=result.persisted,
    )


@router.post("/clear", response_model=ClearResponseSchema)
def clear_appointments(container: Container = Depends(get_container)):
    persisted = container.appointments.clear()
    for phone in container.conversations.active_phones():
        container.conversations.clear_state(phone)
    logger.info("Appointments cleared", extra={"event": "appointments_cleared"})
    return ClearResponseSchema(message="All appointments cleared successfully", persisted=persisted)


@router.get("", response_model=AppointmentListSchema)
def list_appointments(container: Container = Depends(get_container)):
    appointments = container.appointments.all()
    return AppointmentListSchema(
        count=len(appointments),
        appointments=[
            AppointmentSchema(name=a.name, phone=a.phone, appointment_time=a.appointment_time)
            for a in appointments
        ],
    )
