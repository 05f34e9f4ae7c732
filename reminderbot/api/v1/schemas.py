from datetime import datetime

from pydantic import BaseModel, Field


class AppointmentSchema(BaseModel):
    name: str
    phone: str
    appointment_time: datetime


class AppointmentListSchema(BaseModel):
    count: int
    appointments: list[AppointmentSchema] = Field(default_factory=list)


class AppointmentUploadResponseSchema(BaseModel):
    message: str
    count: int
    new: int
    rescheduled_preserved: int
    existing_preserved: int
    hooks_scheduled_for: int
    persisted: bool


class StatusRecordSchema(BaseModel):
    name: str
    phone: str
    status: str


class StatusListSchema(BaseModel):
    count: int
    yes_count: int
    no_count: int
    records: list[StatusRecordSchema] = Field(default_factory=list)


class StatusUploadResponseSchema(BaseModel):
    message: str
    count: int
    added: int
    yes_count: int
    no_count: int
    persisted: bool


class ClearResponseSchema(BaseModel):
    message: str
    persisted: bool
