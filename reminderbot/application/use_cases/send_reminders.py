from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from reminderbot.application.ports.appointment_store import AppointmentStorePort
from reminderbot.application.use_cases.message_composer import MessageComposer
from reminderbot.application.use_cases.send_reply import SendReplyUseCase
from reminderbot.domain.entities.appointment import Appointment

COUNTDOWN = "countdown"
NEAR_TERM = "near_term"


@dataclass(frozen=True)
class ReminderDue:
    phone: str
    kind: str
    days_to_go: int | None = None


class ReminderScheduler:
    """
    Evaluated once per tick. Both rules match on the current wall-clock minute,
    so a tick that misses the minute skips the reminder for that appointment.
    """

    def __init__(
        self,
        appointments: AppointmentStorePort,
        composer: MessageComposer,
        send_reply: SendReplyUseCase,
        timezone: ZoneInfo,
        countdown_trigger: time = time(11, 30),
        countdown_max_days: int = 7,
        near_term_lead: timedelta = timedelta(hours=5),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._appointments = appointments
        self._composer = composer
        self._send_reply = send_reply
        self._timezone = timezone
        self._countdown_trigger = countdown_trigger
        self._countdown_max_days = countdown_max_days
        self._near_term_lead = near_term_lead
        self._clock = clock or (lambda: datetime.now(timezone))
        # (phone, kind, appointment time, minute) sent during the current minute
        self._sent: set[tuple[str, str, str, str]] = set()
        self._logger = logging.getLogger(__name__)

    def due_reminders(self, appointment: Appointment, now: datetime) -> list[ReminderDue]:
        now = now.astimezone(self._timezone)
        appointment_time = appointment.appointment_time.astimezone(self._timezone)
        due: list[ReminderDue] = []

        days_to_go = (appointment_time.date() - now.date()).days
        at_trigger = now.hour == self._countdown_trigger.hour and now.minute == self._countdown_trigger.minute
        if at_trigger and 1 <= days_to_go <= self._countdown_max_days:
            due.append(ReminderDue(phone=appointment.phone, kind=COUNTDOWN, days_to_go=days_to_go))

        reminder_minute = _truncate_to_minute(appointment_time - self._near_term_lead)
        if reminder_minute == _truncate_to_minute(now):
            due.append(ReminderDue(phone=appointment.phone, kind=NEAR_TERM))

        return due

    def tick(self, now: datetime | None = None) -> list[ReminderDue]:
        """Send every reminder due this minute. Never raises."""
        now = (now or self._clock()).astimezone(self._timezone)
        minute_key = _truncate_to_minute(now).isoformat()
        self._sent = {key for key in self._sent if key[3] == minute_key}

        appointments = self._appointments.all()
        if not appointments:
            return []

        sent: list[ReminderDue] = []
        for appointment in appointments:
            try:
                for reminder in self.due_reminders(appointment, now):
                    key = (appointment.phone, reminder.kind, appointment.appointment_time.isoformat(), minute_key)
                    if key in self._sent:
                        continue
                    if self._send(appointment, reminder):
                        self._sent.add(key)
                        sent.append(reminder)
            except Exception as e:
                self._logger.exception(
                    "Error evaluating reminders",
                    extra={"phone": appointment.phone, "reason": str(e)},
                )
        return sent

    def _send(self, appointment: Appointment, reminder: ReminderDue) -> bool:
        if not self._send_reply.is_connected():
            self._logger.warning(
                "Transport disconnected, reminder skipped",
                extra={"phone": appointment.phone, "event": reminder.kind},
            )
            return False

        if reminder.kind == COUNTDOWN:
            text = self._composer.countdown_reminder(appointment, reminder.days_to_go or 0)
        else:
            lead_hours = int(self._near_term_lead.total_seconds() // 3600)
            text = self._composer.near_term_reminder(appointment, lead_hours)

        self._send_reply.execute(appointment.phone, text)
        self._logger.info(
            "Reminder sent",
            extra={"phone": appointment.phone, "event": reminder.kind, "reason": f"days_to_go={reminder.days_to_go}"},
        )
        return True


def _truncate_to_minute(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)
