"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./tuneledger.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None
    # seconds a SQLite writer waits for the lock before failing
    sqlite_busy_timeout: float = 10.0


class SecuritySettings(BaseModel):
    """Verification parameters for bearer tokens issued by the identity provider."""

    secret_key: str = Field(default="change-me", min_length=8)
    algorithm: str = "HS256"
    audience: Optional[str] = None
    admin_roles: tuple[str, ...] = ("admin", "superadmin")


class PaymentSettings(BaseModel):
    webhook_secret: str = Field(default="whsec-change-me", min_length=8)
    signature_header: str = "X-Payment-Signature"
    signature_tolerance: int = 300
    currency: str = "EUR"


class RealtimeSettings(BaseModel):
    auth_grace_seconds: float = 5.0
    subscription_queue_size: int = 100


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)-8s] %(name)s - %(message)s"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TUNELEDGER_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Tuning Portal Credit Ledger"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    payments: PaymentSettings = PaymentSettings()
    realtime: RealtimeSettings = RealtimeSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def secret_key(self) -> str:
        return self.security.secret_key

    @property
    def algorithm(self) -> str:
        return self.security.algorithm


@lru_cache()
def get_settings() -> Settings:
    return Settings()
