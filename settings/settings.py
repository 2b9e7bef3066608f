import logging

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings

from mailsync.constants.emails import DEFAULT_SENT_FOLDERS
from mailsync.environment import EnvironmentName
from settings.log import LoggingSettings


class DatabaseSettings(BaseSettings):
    host: str = Field(alias="DATABASE_HOST", default="postgresql://localhost:5432")
    name: str = Field(alias="DATABASE_NAME", default="mailsync")
    min_pool_size: int = Field(alias="DATABASE_MIN_POOL_SIZE", default=5)
    max_pool_size: int = Field(alias="DATABASE_MAX_POOL_SIZE", default=20)

    @property
    def async_host(self) -> str:
        """Return the host URL with async driver for SQLAlchemy async engine."""
        return self.host.replace("postgresql://", "postgresql+asyncpg://", 1)


class IMAPSettings(BaseSettings):
    timeout: int = Field(alias="IMAP_TIMEOUT", default=60)
    logout_timeout: int = Field(alias="IMAP_LOGOUT_TIMEOUT", default=5)
    sent_folders_raw: str = Field(alias="IMAP_SENT_FOLDERS", default=",".join(DEFAULT_SENT_FOLDERS))

    @property
    def sent_folders(self) -> list[str]:
        """Sent folder candidates in probing order."""
        return [folder.strip() for folder in self.sent_folders_raw.split(",") if folder.strip()]


class SMTPSettings(BaseSettings):
    timeout: int = Field(alias="SMTP_TIMEOUT", default=60)
    save_to_sent: bool = Field(alias="SMTP_SAVE_TO_SENT", default=True)


class APISettings(BaseSettings):
    default_page_limit: int = Field(alias="API_DEFAULT_PAGE_LIMIT", default=20)
    max_page_limit: int = Field(alias="API_MAX_PAGE_LIMIT", default=100)


class SentrySettings(BaseSettings):
    dsn: str | None = Field(alias="SENTRY_DSN", default=None)

    @property
    def is_enabled(self) -> bool:
        return bool(self.dsn)


class ClientSettings(BaseSettings):
    backend_url: str = Field(alias="MAILSYNC_BACKEND_URL", default="http://localhost:8001")
    page_limit: int = Field(alias="MAILSYNC_PAGE_LIMIT", default=20)
    request_timeout: int = Field(alias="MAILSYNC_REQUEST_TIMEOUT", default=60)


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "allow"}

    environment: EnvironmentName = Field(alias="ENVIRONMENT")
    password_encryption_key: str = Field(alias="PASSWORD_ENCRYPTION_KEY")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    imap: IMAPSettings = Field(default_factory=IMAPSettings)
    smtp: SMTPSettings = Field(default_factory=SMTPSettings)
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    sentry: SentrySettings = Field(default_factory=SentrySettings)
    client: ClientSettings = Field(default_factory=ClientSettings)

    @field_validator("environment", mode="before")
    def set_environment(cls, value: str, info: ValidationInfo) -> EnvironmentName:
        try:
            return EnvironmentName(value)
        except ValueError:
            logging.getLogger(__name__).warning(f"Invalid environment: {value}")
            return EnvironmentName.DEVELOPMENT
