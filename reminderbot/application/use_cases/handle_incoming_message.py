from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from zoneinfo import ZoneInfo

from reminderbot.application.ports.appointment_store import AppointmentStorePort
from reminderbot.application.ports.conversation_store import ConversationStorePort
from reminderbot.application.ports.reply_dispatcher import ReplyDispatcherPort
from reminderbot.application.use_cases.message_composer import MessageComposer
from reminderbot.application.use_cases.rescheduling import (
    CancelAppointment,
    RescheduleAppointment,
    ReschedulingStateMachine,
    SendText,
    Transition,
)
from reminderbot.application.utils.sheet_values import normalize_phone
from reminderbot.domain.entities.message import InboundMessage


class HandleIncomingMessageUseCase:
    def __init__(
        self,
        appointments: AppointmentStorePort,
        conversations: ConversationStorePort,
        state_machine: ReschedulingStateMachine,
        composer: MessageComposer,
        dispatcher: ReplyDispatcherPort,
        timezone: ZoneInfo,
        reply_delay_seconds: float = 5.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._appointments = appointments
        self._conversations = conversations
        self._state_machine = state_machine
        self._composer = composer
        self._dispatcher = dispatcher
        self._timezone = timezone
        self._reply_delay_seconds = reply_delay_seconds
        self._clock = clock or (lambda: datetime.now(timezone))
        self._logger = logging.getLogger(__name__)

    def handle(self, message: InboundMessage) -> None:
        if self._conversations.has_processed(message.id):
            self._logger.info("Duplicate message ignored", extra={"message_id": message.id})
            return
        self._conversations.mark_processed(message.id)

        phone = normalize_phone(message.sender_id)
        appointment = self._appointments.find(phone)
        # Unknown contacts and media messages get no reply at all
        if appointment is None or message.has_non_text_payload:
            self._logger.debug("Message ignored", extra={"message_id": message.id, "reason": "not_routable"})
            return

        self._logger.info(
            "Message received",
            extra={"message_id": message.id, "phone": phone, "reply_text": message.text},
        )

        now = self._clock().astimezone(self._timezone)
        state = self._conversations.get_state(phone, now_ts=now.timestamp())
        try:
            transition = self._state_machine.transition(state, appointment, message.text, now)
            self._apply(phone, transition)
        except Exception as e:
            self._logger.exception(
                "Error handling conversation stage",
                extra={"phone": phone, "stage": state.stage.value if state else "idle", "reason": str(e)},
            )
            self._conversations.clear_state(phone)
            self._dispatcher.dispatch(phone, self._composer.apology(), self._reply_delay_seconds)

    def _apply(self, phone: str, transition: Transition) -> None:
        for effect in transition.effects:
            if isinstance(effect, CancelAppointment):
                if self._appointments.remove(effect.phone) is None:
                    self._finish_missing(phone)
                    return
            elif isinstance(effect, RescheduleAppointment):
                if self._appointments.reschedule(effect.phone, effect.new_time) is None:
                    self._finish_missing(phone)
                    return
            elif isinstance(effect, SendText):
                self._dispatcher.dispatch(phone, effect.text, self._reply_delay_seconds)

        if transition.state is None:
            self._conversations.clear_state(phone)
        else:
            self._conversations.set_state(phone, transition.state)

        self._logger.info(
            "Conversation transition",
            extra={
                "event": transition.event,
                "phone": phone,
                "stage": transition.state.stage.value if transition.state else "idle",
            },
        )

    def _finish_missing(self, phone: str) -> None:
        self._conversations.clear_state(phone)
        self._dispatcher.dispatch(phone, self._composer.appointment_not_found(), self._reply_delay_seconds)
        self._logger.warning("Appointment vanished mid-dialogue", extra={"phone": phone})
