from pydantic_settings import BaseSettings
from typing import List, Optional, Literal
from decimal import Decimal


class Settings(BaseSettings):
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: str = "sqlite:////data/promotions.db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"

    # Источник акций: своя БД или бэкенд мерчанта
    PROMOTION_STORE: Literal["sql", "http"] = "sql"
    MERCHANT_API_BASE_URL: Optional[str] = None
    MERCHANT_ADMIN_KEY: Optional[str] = None

    # Кэш снапшотов
    PROMOTION_CACHE_TTL_SECONDS: float = 30.0
    PROMOTION_FETCH_TIMEOUT_SECONDS: float = 5.0
    PROMOTION_CACHE_MAX_MERCHANTS: int = 1024

    # Расчёт цены
    FLASH_PRICE_TOLERANCE: Decimal = Decimal("0.01")
    CURRENCY_DECIMAL_PLACES: int = 2

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def merchant_api_configured(self) -> bool:
        return bool(
            self.MERCHANT_API_BASE_URL and self.MERCHANT_API_BASE_URL.strip()
            and self.MERCHANT_ADMIN_KEY and self.MERCHANT_ADMIN_KEY.strip()
        )

    class Config:
        env_file = ".env"


settings = Settings()
