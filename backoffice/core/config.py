from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from decimal import Decimal
from pydantic import field_validator

class Settings(BaseSettings):
    # Database settings
    POSTGRES_USER: str = 'backoffice_user'
    POSTGRES_PASSWORD: str = 'backoffice_pass'
    POSTGRES_DB: str = 'backoffice_db'
    POSTGRES_HOST: str = 'postgres'
    POSTGRES_PORT: int = 5432

    # URL completa (tiene prioridad sobre POSTGRES_*), ej: sqlite+aiosqlite:///:memory:
    DATABASE_URL: Optional[str] = None

    # Pagos
    PAYMENT_EPSILON: Decimal = Decimal("0.01")  # Tolerancia de redondeo para "pagada"

    # Notas de salida
    EXIT_NOTE_PREFIX: str = 'NS-'
    PAYMENT_NOTE_PREFIX: str = 'NP-'
    SHIPPING_FEE: Decimal = Decimal("28")
    SHIPPING_FEE_PRODUCT_ID: str = 'shipping-fee-28'
    ECUADOR_NOTE_MARKER: str = 'ECU'  # Notas de Bodega Ecuador no llevan envío

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("DEBUG", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower().strip('"').strip("'") in ("true", "1", "yes", "on")
        return bool(v)

    @field_validator("PAYMENT_EPSILON")
    @classmethod
    def validate_epsilon(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("PAYMENT_EPSILON no puede ser negativo")
        return v

settings = Settings()
