from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time, timedelta
from functools import lru_cache
from zoneinfo import ZoneInfo

from reminderbot.application.ports.message_platform import MessagePlatformPort
from reminderbot.application.ports.text_generator import TextGeneratorPort
from reminderbot.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from reminderbot.application.use_cases.import_appointments import ImportAppointmentsUseCase
from reminderbot.application.use_cases.import_statuses import StatusRegistry
from reminderbot.application.use_cases.message_composer import MessageComposer
from reminderbot.application.use_cases.rescheduling import ReschedulingStateMachine
from reminderbot.application.use_cases.send_hook_messages import SendHookMessagesUseCase
from reminderbot.application.use_cases.send_reminders import ReminderScheduler
from reminderbot.application.use_cases.send_reply import SendReplyUseCase
from reminderbot.application.utils.availability import AvailabilityEngine
from reminderbot.application.utils.time_parser import TimeSlotResolver
from reminderbot.core.config import Settings, settings
from reminderbot.domain.entities.business_hours import CalendarModel, parse_weekly_hours
from reminderbot.infrastructure.llm.openai_text_generator import OpenAITextGenerator
from reminderbot.infrastructure.scheduling.asyncio_dispatcher import AsyncioReplyDispatcher
from reminderbot.infrastructure.spreadsheet.excel_gateway import ExcelGateway
from reminderbot.infrastructure.store.appointment_store import AppointmentStore
from reminderbot.infrastructure.store.json_store import JsonSeenPhonesStore, JsonStatusStore
from reminderbot.infrastructure.store.memory_store import MemoryConversationStore
from reminderbot.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform
from reminderbot.infrastructure.whatsapp.whatsapp_client import WhatsAppClient
from reminderbot.infrastructure.whatsapp.whatsapp_platform import WhatsAppPlatform

logger = logging.getLogger(__name__)


@dataclass
class Container:
    timezone: ZoneInfo
    appointments: AppointmentStore
    conversations: MemoryConversationStore
    statuses: StatusRegistry
    platform: MessagePlatformPort
    send_reply: SendReplyUseCase
    dispatcher: AsyncioReplyDispatcher
    handle_incoming_message: HandleIncomingMessageUseCase
    import_appointments: ImportAppointmentsUseCase
    send_hook_messages: SendHookMessagesUseCase
    reminder_scheduler: ReminderScheduler


def _parse_clock(value: str) -> time:
    hour, _, minute = value.strip().partition(":")
    return time(int(hour), int(minute or 0))


def build_text_generator(cfg: Settings) -> TextGeneratorPort | None:
    if cfg.TEXTGEN_API_KEY and cfg.TEXTGEN_API_KEY.strip():
        return OpenAITextGenerator(
            api_key=cfg.TEXTGEN_API_KEY,
            base_url=cfg.TEXTGEN_BASE_URL,
            model=cfg.TEXTGEN_MODEL,
            temperature=cfg.TEXTGEN_TEMPERATURE,
        )
    logger.info("TEXTGEN_API_KEY missing, using message templates only")
    return None


def build_platform(cfg: Settings) -> MessagePlatformPort:
    logger.info(
        "WHATSAPP_ACCESS_TOKEN present=%s phone_number_id present=%s",
        bool(cfg.WHATSAPP_ACCESS_TOKEN),
        bool(cfg.WHATSAPP_PHONE_NUMBER_ID),
    )
    logger.info("ENV=%s", cfg.ENV)

    if not (cfg.WHATSAPP_ACCESS_TOKEN and cfg.WHATSAPP_PHONE_NUMBER_ID):
        if cfg.ENV.lower() in {"dev", "local"}:
            logger.info("Using MockWhatsAppPlatform (credentials missing, ENV=dev/local)")
            return MockWhatsAppPlatform()
        raise ValueError("WHATSAPP_ACCESS_TOKEN and WHATSAPP_PHONE_NUMBER_ID are required to send replies.")

    logger.info("Using real WhatsAppPlatform")
    client = WhatsAppClient(
        access_token=cfg.WHATSAPP_ACCESS_TOKEN,
        phone_number_id=cfg.WHATSAPP_PHONE_NUMBER_ID,
        api_version=cfg.WHATSAPP_GRAPH_API_VERSION,
    )
    return WhatsAppPlatform(client=client)


def build_container(
    cfg: Settings,
    platform: MessagePlatformPort | None = None,
    generator: TextGeneratorPort | None = None,
) -> Container:
    tz = ZoneInfo(cfg.BUSINESS_TIMEZONE)
    calendar = CalendarModel(
        weekly_hours=parse_weekly_hours(cfg.BUSINESS_HOURS_JSON),
        slot_minutes=cfg.SLOT_DURATION_MINUTES,
    )

    spreadsheet = ExcelGateway(cfg.APPOINTMENTS_FILE, tz)
    appointments = AppointmentStore(spreadsheet=spreadsheet)
    conversations = MemoryConversationStore(idle_timeout_seconds=cfg.CONVERSATION_IDLE_TIMEOUT_MINUTES * 60)
    statuses = StatusRegistry(store=JsonStatusStore(cfg.STATUS_FILE), spreadsheet=spreadsheet)

    platform = platform if platform is not None else build_platform(cfg)
    composer = MessageComposer(timezone=tz, generator=generator if generator is not None else build_text_generator(cfg))
    send_reply = SendReplyUseCase(
        platform=platform,
        auto_reply_enabled=cfg.AUTO_REPLY_ENABLED,
    )
    dispatcher = AsyncioReplyDispatcher(send_reply=send_reply)

    state_machine = ReschedulingStateMachine(
        appointments=appointments,
        availability=AvailabilityEngine(calendar=calendar, timezone=tz),
        resolver=TimeSlotResolver(timezone=tz, tolerance_minutes=cfg.FUZZY_TOLERANCE_MINUTES),
        composer=composer,
        horizon_days=cfg.RESCHEDULE_HORIZON_DAYS,
    )

    return Container(
        timezone=tz,
        appointments=appointments,
        conversations=conversations,
        statuses=statuses,
        platform=platform,
        send_reply=send_reply,
        dispatcher=dispatcher,
        handle_incoming_message=HandleIncomingMessageUseCase(
            appointments=appointments,
            conversations=conversations,
            state_machine=state_machine,
            composer=composer,
            dispatcher=dispatcher,
            timezone=tz,
            reply_delay_seconds=cfg.REPLY_DELAY_SECONDS,
        ),
        import_appointments=ImportAppointmentsUseCase(
            appointments=appointments,
            spreadsheet=spreadsheet,
            seen_phones=JsonSeenPhonesStore(cfg.SEEN_PHONES_FILE),
            timezone=tz,
        ),
        send_hook_messages=SendHookMessagesUseCase(
            statuses=statuses,
            composer=composer,
            send_reply=send_reply,
            dispatcher=dispatcher,
            initial_delay_seconds=cfg.HOOK_INITIAL_DELAY_SECONDS,
            spacing_seconds=cfg.HOOK_MESSAGE_SPACING_SECONDS,
        ),
        reminder_scheduler=ReminderScheduler(
            appointments=appointments,
            composer=composer,
            send_reply=send_reply,
            timezone=tz,
            countdown_trigger=_parse_clock(cfg.COUNTDOWN_TRIGGER_TIME),
            countdown_max_days=cfg.COUNTDOWN_MAX_DAYS,
            near_term_lead=timedelta(minutes=cfg.NEAR_TERM_LEAD_MINUTES),
        ),
    )


@lru_cache
def get_container() -> Container:
    return build_container(settings)
