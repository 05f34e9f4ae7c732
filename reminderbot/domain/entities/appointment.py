from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Appointment:
    name: str
    phone: str  # digits only
    appointment_time: datetime  # tz-aware, business timezone
