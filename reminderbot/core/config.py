from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    TEXTGEN_API_KEY: str | None = None
    TEXTGEN_BASE_URL: str | None = "https://api.groq.com/openai/v1"
    TEXTGEN_MODEL: str = "llama3-8b-8192"
    TEXTGEN_TEMPERATURE: float = 0.7

    WHATSAPP_ACCESS_TOKEN: str | None = None
    WHATSAPP_PHONE_NUMBER_ID: str | None = None
    WHATSAPP_GRAPH_API_VERSION: str = "v20.0"
    WHATSAPP_VERIFY_TOKEN: str = ""
    WHATSAPP_APP_SECRET: str | None = None

    BUSINESS_NAME: str = "Your Business"
    BUSINESS_TIMEZONE: str = "America/Los_Angeles"
    # {"0": ["10:00", "21:00"], ..., "6": null} keyed by Python weekday (Monday=0)
    BUSINESS_HOURS_JSON: str | None = None
    SLOT_DURATION_MINUTES: int = 60
    RESCHEDULE_HORIZON_DAYS: int = 7
    FUZZY_TOLERANCE_MINUTES: int = 15
    CONVERSATION_IDLE_TIMEOUT_MINUTES: int = 1440

    REPLY_DELAY_SECONDS: float = 5.0
    REMINDER_TICK_SECONDS: float = 60.0
    COUNTDOWN_TRIGGER_TIME: str = "11:30"
    COUNTDOWN_MAX_DAYS: int = 7
    NEAR_TERM_LEAD_MINUTES: int = 300
    HOOK_INITIAL_DELAY_SECONDS: float = 5.0
    HOOK_MESSAGE_SPACING_SECONDS: float = 300.0

    DATA_DIR: str = "./data"
    # Unset file paths default to DATA_DIR/<name>
    APPOINTMENTS_FILE: str = ""
    STATUS_FILE: str = ""
    SEEN_PHONES_FILE: str = ""

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    AUTO_REPLY_ENABLED: bool = False

    @model_validator(mode="after")
    def _default_data_files(self) -> "Settings":
        data_dir = Path(self.DATA_DIR)
        if not self.APPOINTMENTS_FILE:
            self.APPOINTMENTS_FILE = str(data_dir / "appointments.xlsx")
        if not self.STATUS_FILE:
            self.STATUS_FILE = str(data_dir / "status.json")
        if not self.SEEN_PHONES_FILE:
            self.SEEN_PHONES_FILE = str(data_dir / "seen_phones.json")
        return self


settings = Settings()
