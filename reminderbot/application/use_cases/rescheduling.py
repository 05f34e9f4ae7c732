from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import datetime

from reminderbot.application.ports.appointment_store import AppointmentStorePort
from reminderbot.application.use_cases.message_composer import MessageComposer
from reminderbot.application.utils.availability import AvailabilityEngine
from reminderbot.application.utils.time_parser import TimeSlotResolver, parse_time_expression
from reminderbot.domain.entities.appointment import Appointment
from reminderbot.domain.entities.conversation_state import ConversationState, Stage

CANCEL_KEYWORDS = ("cancel", "cancellation")
CONFIRM_KEYWORDS = ("confirm cancel", "confirm")
CONFIRM_EXACT = ("yes", "cancel")
RESCHEDULE_KEYWORD = "reschedule"

_LEADING_NUMBER = re.compile(r"^\s*(\d+)")


@dataclass(frozen=True)
class SendText:
    text: str


@dataclass(frozen=True)
class CancelAppointment:
    phone: str


@dataclass(frozen=True)
class RescheduleAppointment:
    phone: str
    new_time: datetime


Effect = SendText | CancelAppointment | RescheduleAppointment


@dataclass(frozen=True)
class Transition:
    state: ConversationState | None  # None means the dialogue is over (idle)
    effects: tuple[Effect, ...] = field(default_factory=tuple)
    event: str = "ignored"

    @property
    def replies(self) -> list[str]:
        return [effect.text for effect in self.effects if isinstance(effect, SendText)]


def normalize_message(text: str) -> str:
    return re.sub(r"\s+", " ", text.strip().lower())


class ReschedulingStateMachine:
    """
    Pure transition function for the cancel/reschedule dialogue.

    transition() only reads the appointment store; every write is returned as
    an effect for the caller to apply.
    """

    def __init__(
        self,
        appointments: AppointmentStorePort,
        availability: AvailabilityEngine,
        resolver: TimeSlotResolver,
        composer: MessageComposer,
        horizon_days: int = 7,
    ) -> None:
        self._appointments = appointments
        self._availability = availability
        self._resolver = resolver
        self._composer = composer
        self._horizon_days = horizon_days
        self._logger = logging.getLogger(__name__)

    def transition(
        self,
        state: ConversationState | None,
        appointment: Appointment,
        text: str,
        now: datetime,
    ) -> Transition:
        normalized = normalize_message(text)
        stage = state.stage if state else Stage.IDLE

        if stage == Stage.IDLE:
            return self._from_idle(appointment, normalized, now)
        if stage == Stage.CONFIRMING_CANCELLATION:
            return self._from_confirming_cancellation(state, appointment, normalized, now)
        if stage == Stage.SELECTING_DATE:
            return self._from_selecting_date(state, normalized, now)
        if stage == Stage.SELECTING_TIME:
            return self._from_selecting_time(state, text, normalized, now)

        raise ValueError(f"Unknown conversation stage: {stage}")

    def _from_idle(self, appointment: Appointment, normalized: str, now: datetime) -> Transition:
        if any(keyword in normalized for keyword in CANCEL_KEYWORDS):
            return Transition(
                state=ConversationState(
                    phone=appointment.phone,
                    stage=Stage.CONFIRMING_CANCELLATION,
                    current_appointment=appointment,
                    updated_at=now.timestamp(),
                ),
                effects=(SendText(self._composer.retention(appointment)),),
                event="cancellation_requested",
            )
        if RESCHEDULE_KEYWORD in normalized:
            return self._start_reschedule(appointment, now)
        return Transition(state=None, event="ignored")

    def _from_confirming_cancellation(
        self,
        state: ConversationState,
        appointment: Appointment,
        normalized: str,
        now: datetime,
    ) -> Transition:
        confirmed = any(keyword in normalized for keyword in CONFIRM_KEYWORDS) or normalized in CONFIRM_EXACT
        if confirmed:
            return Transition(
                state=None,
                effects=(
                    CancelAppointment(phone=appointment.phone),
                    SendText(self._composer.farewell(appointment)),
                ),
                event="cancellation_confirmed",
            )
        if RESCHEDULE_KEYWORD in normalized:
            return self._start_reschedule(appointment, now)
        return Transition(
            state=replace(state, updated_at=now.timestamp()),
            effects=(SendText(self._composer.cancellation_choice_unclear()),),
            event="cancellation_choice_unclear",
        )

    def _start_reschedule(self, appointment: Appointment, now: datetime) -> Transition:
        dates = self._availability.candidate_dates(self._horizon_days, today=now.date())
        if not dates:
            return Transition(
                state=None,
                effects=(SendText(self._composer.no_dates_available()),),
                event="no_dates_available",
            )
        return Transition(
            state=ConversationState(
                phone=appointment.phone,
                stage=Stage.SELECTING_DATE,
                current_appointment=appointment,
                available_dates=tuple(dates),
                updated_at=now.timestamp(),
            ),
            effects=(SendText(self._composer.date_options(appointment, dates)),),
            event="dates_offered",
        )

    def _from_selecting_date(self, state: ConversationState, normalized: str, now: datetime) -> Transition:
        dates = state.available_dates
        match = _LEADING_NUMBER.match(normalized)
        index = int(match.group(1)) - 1 if match else -1
        if not 0 <= index < len(dates):
            return Transition(
                state=replace(state, updated_at=now.timestamp()),
                effects=(SendText(self._composer.invalid_date_choice(dates)),),
                event="invalid_date_choice",
            )

        selected = dates[index]
        slots = self._availability.candidate_slots(selected, self._appointments.all(), exclude_phone=state.phone)
        if not slots:
            return Transition(
                state=replace(state, stage=Stage.SELECTING_DATE, updated_at=now.timestamp()),
                effects=(SendText(self._composer.no_slots_for_date(dates)),),
                event="no_slots_for_date",
            )

        return Transition(
            state=replace(
                state,
                stage=Stage.SELECTING_TIME,
                selected_date=selected,
                available_time_slots=tuple(slots),
                updated_at=now.timestamp(),
            ),
            effects=(SendText(self._composer.time_options(selected, slots)),),
            event="slots_offered",
        )

    def _from_selecting_time(
        self,
        state: ConversationState,
        raw_text: str,
        normalized: str,
        now: datetime,
    ) -> Transition:
        slots = state.available_time_slots
        parsed = parse_time_expression(normalized)
        if parsed is None:
            return Transition(
                state=replace(state, updated_at=now.timestamp()),
                effects=(SendText(self._composer.time_not_understood(slots)),),
                event="time_not_understood",
            )

        match = self._resolver.match(parsed, slots)
        if match is None:
            return Transition(
                state=replace(state, updated_at=now.timestamp()),
                effects=(SendText(self._composer.time_not_available(raw_text.strip(), slots)),),
                event="time_not_available",
            )

        if match.fuzzy:
            self._logger.info(
                "Time matched within tolerance",
                extra={"phone": state.phone, "reason": f"input={normalized!r} slot={match.slot.isoformat()}"},
            )

        old_time = state.current_appointment.appointment_time
        return Transition(
            state=None,
            effects=(
                RescheduleAppointment(phone=state.phone, new_time=match.slot),
                SendText(self._composer.rescheduled(old_time, match.slot)),
            ),
            event="rescheduled",
        )
