from fastapi import Request
from app.core.config import Settings, settings
from app.services.pricing import PricingOptions
from app.services.snapshot_cache import SnapshotCache
from app.services.store import PromotionStore, SqlPromotionStore, HttpPromotionStore


def build_store(config: Settings) -> PromotionStore:
    """Хранилище акций по настройкам"""
    if config.PROMOTION_STORE == "http":
        if not config.merchant_api_configured:
            raise RuntimeError("PROMOTION_STORE=http requires MERCHANT_API_BASE_URL and MERCHANT_ADMIN_KEY")
        return HttpPromotionStore(
            base_url=config.MERCHANT_API_BASE_URL,
            admin_key=config.MERCHANT_ADMIN_KEY,
            timeout=config.PROMOTION_FETCH_TIMEOUT_SECONDS,
        )

    from app.db.session import engine
    return SqlPromotionStore(engine)


def build_snapshot_cache(store: PromotionStore, config: Settings) -> SnapshotCache:
    return SnapshotCache(
        store,
        ttl_seconds=config.PROMOTION_CACHE_TTL_SECONDS,
        timeout_seconds=config.PROMOTION_FETCH_TIMEOUT_SECONDS,
        max_entries=config.PROMOTION_CACHE_MAX_MERCHANTS,
    )


def get_settings() -> Settings:
    return settings


def get_snapshot_cache(request: Request) -> SnapshotCache:
    return request.app.state.snapshot_cache


def get_pricing_options(request: Request) -> PricingOptions:
    return PricingOptions.from_settings(request.app.state.settings)
