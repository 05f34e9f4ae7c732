from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from reminderbot.domain.entities.appointment import Appointment
from reminderbot.domain.entities.business_hours import CalendarModel


class AvailabilityEngine:
    """Works out which dates and slots can still be offered for a reschedule."""

    def __init__(self, calendar: CalendarModel, timezone: ZoneInfo) -> None:
        self._calendar = calendar
        self._timezone = timezone

    @property
    def slot_duration(self) -> timedelta:
        return timedelta(minutes=self._calendar.slot_minutes)

    def candidate_dates(self, horizon_days: int, today: date | None = None) -> list[date]:
        """Open days from tomorrow through today + horizon_days, in order."""
        if today is None:
            today = datetime.now(self._timezone).date()

        dates: list[date] = []
        for offset in range(1, horizon_days + 1):
            day = today + timedelta(days=offset)
            if self._calendar.is_open(day.weekday()):
                dates.append(day)
        return dates

    def candidate_slots(
        self,
        day: date,
        appointments: Iterable[Appointment],
        exclude_phone: str | None = None,
    ) -> list[datetime]:
        hours = self._calendar.hours_for(day.weekday())
        if hours is None:
            return []

        others = [a for a in appointments if a.phone != exclude_phone]
        step = self.slot_duration
        current = datetime.combine(day, hours.open, tzinfo=self._timezone)
        end_time = datetime.combine(day, hours.close, tzinfo=self._timezone)

        slots: list[datetime] = []
        while current < end_time:
            if not any(self.conflicts(current, appt) for appt in others):
                slots.append(current)
            current += step
        return slots

    def conflicts(self, proposed: datetime, appointment: Appointment) -> bool:
        # Same local calendar date and closer than one slot
        booked = appointment.appointment_time.astimezone(self._timezone)
        local = proposed.astimezone(self._timezone)
        if booked.date() != local.date():
            return False
        return abs(local - booked) < self.slot_duration
