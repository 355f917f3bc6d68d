"""Application settings loaded from the environment."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field, PostgresDsn, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagemeter.core.config.enums import Environment, LogLevel


class Settings(BaseSettings):
    """Settings for the PageMeter backend.

    Attributes:
    ----------
        PROJECT_NAME (str): The name of the project.
        ENVIRONMENT (Environment): Deployment environment.
        DEBUG (bool): Whether debug output (stack traces) may be returned.
        LOG_LEVEL (LogLevel): Root log level.
        POSTGRES_HOST (str): The PostgreSQL server hostname.
        POSTGRES_PORT (int): The PostgreSQL server port.
        POSTGRES_USER (str): The PostgreSQL username.
        POSTGRES_PASSWORD (str): The PostgreSQL password.
        POSTGRES_DB (str): The PostgreSQL database name.
        POSTGRES_SSLMODE (str): SSL mode for the PostgreSQL connection.
        AUTH_ENABLED (bool): Whether bearer tokens are verified.
        SUPABASE_JWT_SECRET (str): Secret used to verify Supabase access tokens.
        FIRST_SUPERUSER_ID (UUID): User id used when auth is disabled.
        FREE_TRIAL_PAGES (int): Free page allowance granted to new ledgers.
        PROCESSING_COST_PER_PAGE (Decimal): Credit units charged per payable page.
        DISPLAY_COST_PER_PAGE_USD (Decimal): USD per page shown in up-front estimates.
        CHARGE_TRANSACTION_TIMEOUT_SECONDS (float): Deadline for one charge transaction.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    PROJECT_NAME: str = "PageMeter"
    ENVIRONMENT: Environment = Environment.LOCAL
    DEBUG: bool = False
    LOG_LEVEL: LogLevel = LogLevel.INFO
    TESTING: bool = False

    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "pagemeter"
    POSTGRES_PASSWORD: str = "pagemeter"
    POSTGRES_DB: str = "pagemeter"
    POSTGRES_SSLMODE: str = "prefer"

    DB_POOL_SIZE: int = Field(default=10, ge=1)
    DB_POOL_MAX_OVERFLOW: int = Field(default=20, ge=0)

    RUN_ALEMBIC_MIGRATIONS: bool = False

    AUTH_ENABLED: bool = True
    SUPABASE_JWT_SECRET: Optional[str] = None
    SUPABASE_JWT_AUDIENCE: str = "authenticated"
    FIRST_SUPERUSER_ID: UUID = UUID("00000000-0000-0000-0000-000000000001")

    # Usage metering. The two tariffs are unrelated on purpose: one is the
    # internal credit charge, the other a USD figure for cost estimates.
    FREE_TRIAL_PAGES: int = Field(default=5, ge=0)
    PROCESSING_COST_PER_PAGE: Decimal = Decimal("1.2")
    DISPLAY_COST_PER_PAGE_USD: Decimal = Decimal("0.012")
    CHARGE_TRANSACTION_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    ADDITIONAL_CORS_ORIGINS: Optional[str] = None

    @field_validator("PROCESSING_COST_PER_PAGE", "DISPLAY_COST_PER_PAGE_USD")
    @classmethod
    def _non_negative_tariff(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("tariffs must not be negative")
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> str:  # noqa: N802
        """Async SQLAlchemy URI built from the POSTGRES_* settings."""
        return str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_HOST,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )

    @property
    def is_local(self) -> bool:
        """Whether this instance runs in local development."""
        return self.ENVIRONMENT == Environment.LOCAL
