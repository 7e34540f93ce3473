"""Shared fixtures and factories for promotion engine tests."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.schemas.promotion import EvaluationContext, Promotion

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def flash_sale_payload(**overrides):
    """Raw camelCase flash-sale record, active at NOW."""
    payload = {
        "id": "promo-flash",
        "merchantId": "m-1",
        "name": "Flash sale",
        "type": "FLASH_SALE",
        "startAt": "2025-06-01T00:00:00Z",
        "endAt": "2025-06-30T23:59:59Z",
        "channels": ["web"],
        "scope": {"productIds": ["sku-1"]},
        "config": {"kind": "FLASH_SALE", "flashPrice": "9.99", "originalPrice": "14.99"},
        "exposeToCreators": False,
        "humanReadableRule": "Flash price 9.99 instead of 14.99",
    }
    payload.update(overrides)
    return payload


def multi_buy_payload(**overrides):
    """Raw camelCase multi-buy record, active at NOW."""
    payload = {
        "id": "promo-multi",
        "merchantId": "m-1",
        "name": "Buy 3 save 15%",
        "type": "MULTI_BUY_DISCOUNT",
        "startAt": "2025-06-01T00:00:00Z",
        "endAt": "2025-06-30T23:59:59Z",
        "channels": ["web", "app"],
        "scope": {"global": True},
        "config": {"kind": "MULTI_BUY_DISCOUNT", "thresholdQuantity": 3, "discountPercent": 15},
        "exposeToCreators": False,
        "humanReadableRule": "Buy 3 or more, get 15% off each",
    }
    payload.update(overrides)
    return payload


def make_promotion(payload):
    return Promotion.model_validate(payload)


def make_context(**overrides):
    values = {
        "merchant_id": "m-1",
        "product_id": "sku-1",
        "category_ids": ("cat-1",),
        "brand_id": "brand-1",
        "channel": "web",
        "quantity": 2,
        "unit_price": Decimal("14.99"),
    }
    values.update(overrides)
    return EvaluationContext(**values)


@pytest.fixture
def now():
    return NOW
