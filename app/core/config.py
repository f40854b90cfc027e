from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from urllib.parse import quote


class Settings(BaseSettings):
    # Project information
    PROJECT_NAME: str = "Flight Price Alerts"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "username"
    DB_PASSWORD: str = "password"
    DB_NAME: str = "flight_alerts"
    DATABASE_URL: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_url(cls, v, info: ValidationInfo):
        if v:
            return v

        values = info.data
        return f"postgresql://{values['DB_USER']}:{quote(values['DB_PASSWORD'])}@{values['DB_HOST']}:{values['DB_PORT']}/{values['DB_NAME']}"

    # Redis (cache, locks and Celery broker)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_DB: int = 0

    # Cache expiration times (in seconds)
    AIRPORT_CACHE_EXPIRATION: int = 604800  # 7 days for airport lookups

    # Flight provider
    FLIGHT_PROVIDER: str = "mock"  # mock, amadeus

    @field_validator("FLIGHT_PROVIDER")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in ("mock", "amadeus"):
            raise ValueError("FLIGHT_PROVIDER must be 'mock' or 'amadeus'")
        return v

    # Amadeus
    AMADEUS_BASE_URL: str = "https://test.api.amadeus.com"
    AMADEUS_CLIENT_ID: str = Field(default="", validate_default=True)
    AMADEUS_CLIENT_SECRET: SecretStr = Field(default=SecretStr(""), validate_default=True)
    AMADEUS_TOKEN_TTL: int = 1500  # 25 minutes for a 30 minute token
    AMADEUS_TOKEN_SAFETY_MARGIN: int = 300  # taken off tokens that live shorter than the TTL
    AMADEUS_CURRENCY: str = "USD"
    AMADEUS_MAX_RESULTS: int = 50

    @field_validator("AMADEUS_CLIENT_ID", "AMADEUS_CLIENT_SECRET")
    @classmethod
    def validate_amadeus_credentials(cls, v, info: ValidationInfo):
        value = v.get_secret_value() if isinstance(v, SecretStr) else v
        if not value and info.data.get("FLIGHT_PROVIDER") == "amadeus":
            if info.data.get("ENVIRONMENT") == "production":
                raise ValueError(f"{info.field_name} must be set in production")
        return v

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = 15.0

    # Price checks
    PRICE_CHECK_INTERVAL: int = 3600  # seconds between scheduler ticks
    PRICE_CHECK_FRESHNESS: int = 3600  # alerts checked more recently are skipped
    PRICE_CHECK_BATCH_SIZE: int = 50
    PRICE_CHECK_MAX_ATTEMPTS: int = 3
    PRICE_CHECK_BACKOFF_SECONDS: int = 5
    PRICE_CHECK_TIME_LIMIT: int = 120
    STRICT_SINGLE_FLIGHT: bool = False
    ALERT_LOCK_TIMEOUT: int = 300

    # Email
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    EMAIL_SENDER: str = ""
    EMAIL_SENDER_NAME: str = "Flight Deals"
    EMAIL_PASSWORD: SecretStr = SecretStr("")

    # Concurrency settings
    CELERY_WORKERS: int = 4
    CELERY_VISIBILITY_TIMEOUT: int = 3600

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")

    @property
    def redis_url(self) -> str:
        auth = f":{quote(self.REDIS_PASSWORD)}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


settings = Settings()
