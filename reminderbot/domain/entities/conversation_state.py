from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from reminderbot.domain.entities.appointment import Appointment


class Stage(str, Enum):
    IDLE = "idle"
    CONFIRMING_CANCELLATION = "confirming_cancellation"
    SELECTING_DATE = "selecting_date"
    SELECTING_TIME = "selecting_time"


@dataclass(frozen=True)
class ConversationState:
    phone: str
    stage: Stage = Stage.IDLE
    current_appointment: Appointment | None = None
    # Snapshots taken when the options were offered
    available_dates: tuple[date, ...] = field(default_factory=tuple)
    selected_date: date | None = None
    available_time_slots: tuple[datetime, ...] = field(default_factory=tuple)
    updated_at: float | None = None
