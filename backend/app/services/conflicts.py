from dataclasses import dataclass
from decimal import Decimal
from datetime import datetime, timezone
from typing import Optional, List, Tuple
from app.schemas.promotion import Promotion, PromotionType
from app.services.scope import MatchLevel
from app.services.lifecycle import parse_instant
from app.services.pricing import discount_magnitude


@dataclass(frozen=True)
class Candidate:
    """Акция, прошедшая lifecycle, scope и канал для конкретной строки"""
    promotion: Promotion
    level: MatchLevel


@dataclass(frozen=True)
class Winners:
    flash_sale: Optional[Promotion] = None
    multi_buy: Optional[Promotion] = None

    def __iter__(self):
        return iter(p for p in (self.flash_sale, self.multi_buy) if p is not None)


def _precedence_key(candidate: Candidate, unit_price: Decimal, quantity: int) -> Tuple:
    """
    Ключ сортировки (меньше = лучше):
    1. scope конкретнее
    2. скидка больше
    3. раньше startAt
    4. меньше id
    """
    promotion = candidate.promotion
    # До resolve доходят только ACTIVE, то есть с парсящимся окном
    start = parse_instant(promotion.start_at) or datetime.max.replace(tzinfo=timezone.utc)
    return (
        -int(candidate.level),
        -discount_magnitude(promotion, unit_price, quantity),
        start,
        promotion.id,
    )


def select_winner(candidates: List[Candidate], unit_price: Decimal, quantity: int) -> Optional[Promotion]:
    """Один победитель из акций одного вида"""
    if not candidates:
        return None
    best = min(candidates, key=lambda c: _precedence_key(c, unit_price, quantity))
    return best.promotion


def resolve(candidates: List[Candidate], unit_price: Decimal, quantity: int) -> Winners:
    """
    Разрешить конфликты: flash-sale и multi-buy выбираются независимо
    и могут складываться.
    """
    flash = [c for c in candidates if c.promotion.kind == PromotionType.FLASH_SALE.value]
    multi = [c for c in candidates if c.promotion.kind == PromotionType.MULTI_BUY_DISCOUNT.value]

    return Winners(
        flash_sale=select_winner(flash, unit_price, quantity),
        multi_buy=select_winner(multi, unit_price, quantity),
    )
