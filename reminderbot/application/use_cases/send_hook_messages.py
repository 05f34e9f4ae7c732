from __future__ import annotations

import logging

from reminderbot.application.ports.reply_dispatcher import ReplyDispatcherPort
from reminderbot.application.use_cases.import_statuses import StatusRegistry
from reminderbot.application.use_cases.message_composer import MessageComposer
from reminderbot.application.use_cases.send_reply import SendReplyUseCase
from reminderbot.domain.entities.appointment import Appointment


class SendHookMessagesUseCase:
    """Nudges "no"-status contacts when genuinely new appointments arrive."""

    def __init__(
        self,
        statuses: StatusRegistry,
        composer: MessageComposer,
        send_reply: SendReplyUseCase,
        dispatcher: ReplyDispatcherPort,
        initial_delay_seconds: float = 5.0,
        spacing_seconds: float = 300.0,
    ) -> None:
        self._statuses = statuses
        self._composer = composer
        self._send_reply = send_reply
        self._dispatcher = dispatcher
        self._initial_delay_seconds = initial_delay_seconds
        self._spacing_seconds = spacing_seconds
        self._logger = logging.getLogger(__name__)

    def execute(self, new_appointments: list[Appointment]) -> int:
        """Schedule hook messages; returns how many were scheduled."""
        if not new_appointments:
            return 0
        if not self._send_reply.is_connected():
            self._logger.info("Transport disconnected, hook messages skipped")
            return 0

        recipients = self._statuses.with_status("no")
        if not recipients:
            self._logger.info("No people with 'no' status found to send hook messages")
            return 0

        scheduled = 0
        for appointment in new_appointments:
            for index, recipient in enumerate(recipients):
                delay = self._initial_delay_seconds + index * self._spacing_seconds
                text = self._composer.hook(recipient.name, appointment.name)
                self._dispatcher.dispatch(recipient.phone, text, delay)
                scheduled += 1
                self._logger.info(
                    "Hook message scheduled",
                    extra={"phone": recipient.phone, "reason": f"delay={delay}s new={appointment.phone}"},
                )
        return scheduled
