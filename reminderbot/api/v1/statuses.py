from __future__ import annotations

import io
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from reminderbot.api.v1.schemas import (
    ClearResponseSchema,
    StatusListSchema,
    StatusRecordSchema,
    StatusUploadResponseSchema,
)
from reminderbot.application.exceptions import SpreadsheetFormatError
from reminderbot.wiring.dependencies import Container, get_container

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/upload", response_model=StatusUploadResponseSchema)
def upload_statuses(
    file: UploadFile = File(...),
    container: Container = Depends(get_container),
):
    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="No file uploaded")

    try:
        result = container.statuses.import_file(io.BytesIO(content))
    except SpreadsheetFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        logger.warning("Unreadable status upload", extra={"reason": str(e)})
        raise HTTPException(status_code=400, detail=f"Could not read spreadsheet: {e}")

    return StatusUploadResponseSchema(
        message=f"Successfully processed {len(result.records)} status entries ({result.added} new)",
        count=len(result.records),
        added=result.added,
        yes_count=result.yes_count,
        no_count=result.no_count,
        persisted=result.persisted,
    )


@router.post("/clear", response_model=ClearResponseSchema)
def clear_statuses(container: Container = Depends(get_container)):
    persisted = container.statuses.clear()
    return ClearResponseSchema(message="All status data cleared successfully", persisted=persisted)


@router.get("", response_model=StatusListSchema)
def list_statuses(container: Container = Depends(get_container)):
    records = container.statuses.all()
    return StatusListSchema(
        count=len(records),
        yes_count=sum(1 for r in records if r.status == "yes"),
        no_count=sum(1 for r in records if r.status == "no"),
        records=[StatusRecordSchema(name=r.name, phone=r.phone, status=r.status) for r in records],
    )
