import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from reminderbot.api.v1.appointments import router as appointments_router
from reminderbot.api.v1.statuses import router as statuses_router
from reminderbot.api.webhooks import router as webhooks_router
from reminderbot.core.config import settings
from reminderbot.infrastructure.scheduling.reminder_loop import start_reminder_loop, stop_reminder_loop
from reminderbot.wiring.dependencies import Container, get_container


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("message_id", "phone", "stage", "event", "count", "reply_text", "reason"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = get_container()
    container.dispatcher.bind(asyncio.get_running_loop())
    container.import_appointments.load_existing()
    container.statuses.load()
    reminder_task = start_reminder_loop(container.reminder_scheduler, settings.REMINDER_TICK_SECONDS)
    logger.info("Reminder bot started", extra={"reason": f"business={settings.BUSINESS_NAME}"})
    try:
        yield
    finally:
        await stop_reminder_loop(reminder_task)
        await container.dispatcher.shutdown()
        container.platform.close()


app = FastAPI(title="Appointment Reminder Bot", version="1.0.0", lifespan=lifespan)

app.include_router(webhooks_router, tags=["webhooks"])
app.include_router(appointments_router, prefix="/api/v1/appointments", tags=["appointments"])
app.include_router(statuses_router, prefix="/api/v1/statuses", tags=["statuses"])


@app.get("/health")
def health(container: Container = Depends(get_container)) -> dict[str, object]:
    return {
        "status": "ok",
        "connected": container.send_reply.is_connected(),
        "appointments": len(container.appointments.all()),
    }
