# Logging adapter for application-wide logging
from syncwatch.adapters.logging_adapter import LoggingAdapter

from pydantic import HttpUrl, SecretStr, field_validator
from pydantic_settings import BaseSettings
from rich import print

from syncwatch.core.interfaces.logging import LoggingPort

# using pydantic_settings to manage environment variables
# and do automatic type casting in a central place
class SyncWatchSettings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore"
    }
    SYNCWATCH_LOG_LEVEL: str = "INFO"
    SYNCWATCH_API_URL: HttpUrl = HttpUrl("http://localhost:8000")
    SYNCWATCH_API_USERNAME: str | None = None
    SYNCWATCH_API_PASSWORD: SecretStr | None = None
    SYNCWATCH_API_TOKEN: SecretStr | None = None
    SYNCWATCH_POLL_INTERVAL: float = 1.0  # seconds
    SYNCWATCH_MAX_DURATION: float = 3600.0  # seconds
    SYNCWATCH_HTTP_TIMEOUT: float = 10.0  # seconds, per status request
    SYNCWATCH_FETCH_MAX_RETRIES: int = 3
    SYNCWATCH_SERVER_HOST: str = "0.0.0.0"
    SYNCWATCH_SERVER_PORT: int = 8080

    @field_validator("SYNCWATCH_POLL_INTERVAL", "SYNCWATCH_MAX_DURATION", "SYNCWATCH_HTTP_TIMEOUT")
    @classmethod
    def ensure_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("duration must be positive")
        return value

    def print_settings(self, logger: LoggingPort):
        """Prints the settings for debugging purposes"""
        logger.info("SyncWatch Settings:")
        print(self)


app_settings = SyncWatchSettings()

logger = LoggingAdapter("syncwatch", app_settings.SYNCWATCH_LOG_LEVEL)
