from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime
from zoneinfo import ZoneInfo

from reminderbot.application.exceptions import TextGenerationError
from reminderbot.application.ports.text_generator import TextGeneratorPort
from reminderbot.application.utils.formatting import (
    format_date_long,
    format_date_options,
    format_date_short,
    format_datetime_long,
    format_slot_list,
    format_time,
)
from reminderbot.application.utils.prompts import (
    build_countdown_prompt,
    build_farewell_prompt,
    build_hook_prompt,
    build_near_term_prompt,
    build_retention_prompt,
)
from reminderbot.domain.entities.appointment import Appointment

CANCEL_CHOICE_FOOTER = (
    '\n\n✅ To confirm cancellation, reply with "CONFIRM CANCEL"'
    '\n📅 To reschedule instead, reply with "RESCHEDULE"'
)
RESCHEDULE_HINT = '\n\nNeed to reschedule? Just reply with "reschedule" and we\'ll help you find a new time.'
TIME_FORMAT_HELP = (
    "You can try formats like:\n"
    '• "2pm" or "2PM"\n'
    '• "2:00pm" or "2:00PM"\n'
    '• "14:00" (24-hour format)\n'
    '• "6:" or "6:pm"\n'
    '• "2 pm" (with space)'
)
GENERIC_APOLOGY = (
    "Sorry, there was an error processing your request. "
    "Please try again later or contact our office directly."
)


class MessageComposer:
    """
    Builds every outbound text. Prose-heavy messages try the text generator
    once and fall back to a fixed template; the rest are always templated.
    """

    def __init__(self, timezone: ZoneInfo, generator: TextGeneratorPort | None = None) -> None:
        self._timezone = timezone
        self._generator = generator
        self._logger = logging.getLogger(__name__)

    def _generate_or(self, prompt: str, fallback: str, purpose: str) -> str:
        if self._generator is None:
            return fallback
        try:
            return self._generator.generate(prompt)
        except TextGenerationError as e:
            self._logger.warning(
                "Text generation failed, using template",
                extra={"event": purpose, "reason": str(e)},
            )
            return fallback

    # Cancellation

    def retention(self, appointment: Appointment) -> str:
        date_str = format_date_short(appointment.appointment_time.astimezone(self._timezone).date())
        time_str = format_time(appointment.appointment_time, self._timezone)
        fallback = (
            f"✨ *Hi {appointment.name}!* ✨\n\n"
            f"I see you'd like to cancel your appointment for *{date_str}* at *{time_str}*.\n\n"
            "Before we proceed with cancellation, I wanted to mention that this time slot was "
            "reserved specially for you, and our team has been preparing for your visit!\n\n"
            "Life gets busy, and sometimes rescheduling works better than cancelling. We have "
            "several convenient alternatives available that might better fit your schedule."
        )
        body = self._generate_or(
            build_retention_prompt(appointment.name, date_str, time_str), fallback, "retention_message"
        )
        return body + CANCEL_CHOICE_FOOTER

    def farewell(self, appointment: Appointment) -> str:
        fallback = (
            f"Your appointment has been cancelled, {appointment.name}. "
            "Thank you for letting us know. We hope to see you again soon!"
        )
        return self._generate_or(build_farewell_prompt(appointment.name), fallback, "farewell_message")

    def cancellation_choice_unclear(self) -> str:
        return (
            "I'm not sure what you'd like to do. Please reply with either \"CONFIRM CANCEL\" "
            "to cancel your appointment, or \"RESCHEDULE\" to find a new time."
        )

    def appointment_not_found(self) -> str:
        return (
            "We couldn't find your appointment in our system. "
            "Please contact our office directly for assistance."
        )

    # Rescheduling

    def no_dates_available(self) -> str:
        return (
            "We're sorry, but there are no available appointment dates at the moment. "
            "Please try again later or contact our office directly for assistance."
        )

    def date_options(self, appointment: Appointment, dates: Sequence[date]) -> str:
        return (
            f"Hello {appointment.name}, your current appointment is on "
            f"{format_datetime_long(appointment.appointment_time, self._timezone)}.\n\n"
            "To reschedule, please reply with the number of your preferred date:\n\n"
            f"{format_date_options(dates)}\n\n"
            'For example, reply with "1" to select the first date.'
        )

    def invalid_date_choice(self, dates: Sequence[date]) -> str:
        return (
            "Invalid selection. Please enter a number from the list of dates:\n\n"
            f"{format_date_options(dates)}"
        )

    def no_slots_for_date(self, dates: Sequence[date]) -> str:
        return (
            "We're sorry, but there are no available time slots for this date. "
            "Please select another date:\n\n"
            f"{format_date_options(dates)}"
        )

    def time_options(self, day: date, slots: Sequence[datetime]) -> str:
        return (
            f"For {format_date_long(day)}, the available time slots are:\n\n"
            f"{format_slot_list(slots, self._timezone)}\n\n"
            'Please reply with your preferred time (e.g., "2 PM" or "2:00 PM").'
        )

    def time_not_understood(self, slots: Sequence[datetime]) -> str:
        return (
            "Sorry, I couldn't understand that time format. "
            f"Available times are: {format_slot_list(slots, self._timezone)}. "
            'Please try formats like "2pm", "2:00pm", "14:00", or "6:".'
        )

    def time_not_available(self, text: str, slots: Sequence[datetime]) -> str:
        return (
            f'Sorry, I couldn\'t find a matching time slot for "{text}". '
            f"Available times are: {format_slot_list(slots, self._timezone)}.\n\n"
            f"{TIME_FORMAT_HELP}\n\n"
            "Please select one of the available times."
        )

    def rescheduled(self, old_time: datetime, new_time: datetime) -> str:
        return (
            "Great! Your appointment has been rescheduled from "
            f"{format_datetime_long(old_time, self._timezone)} to "
            f"{format_datetime_long(new_time, self._timezone)}.\n\n"
            "We look forward to seeing you then. You will receive reminders before your appointment."
        )

    def apology(self) -> str:
        return GENERIC_APOLOGY

    # Reminders

    def countdown_reminder(self, appointment: Appointment, days_to_go: int) -> str:
        day_of_week = appointment.appointment_time.astimezone(self._timezone).strftime("%A")
        plural = "s" if days_to_go > 1 else ""
        fallback = (
            f"Hi {appointment.name}, just a reminder that your appointment is on {day_of_week} "
            f"({days_to_go} day{plural} to go). See you then!"
        )
        body = self._generate_or(
            build_countdown_prompt(appointment.name, day_of_week, days_to_go), fallback, "countdown_reminder"
        )
        return body + RESCHEDULE_HINT

    def near_term_reminder(self, appointment: Appointment, lead_hours: int) -> str:
        time_str = format_time(appointment.appointment_time, self._timezone)
        fallback = (
            f"Hi {appointment.name}, this is a reminder that your appointment is scheduled for "
            f"today at {time_str}. We look forward to seeing you soon!"
        )
        body = self._generate_or(
            build_near_term_prompt(appointment.name, time_str, lead_hours), fallback, "near_term_reminder"
        )
        return body + RESCHEDULE_HINT

    # Hooks

    def hook(self, recipient_name: str, new_name: str) -> str:
        fallback = (
            f"Hi {recipient_name}! 🎉 {new_name} has just joined our team! "
            "What are you waiting for? Book your appointment with us now!"
        )
        return self._generate_or(build_hook_prompt(recipient_name, new_name), fallback, "hook_message")
