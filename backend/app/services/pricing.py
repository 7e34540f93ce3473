from decimal import Decimal, ROUND_HALF_UP
from dataclasses import dataclass, field
from typing import Optional, List, TYPE_CHECKING, assert_never
from app.schemas.promotion import Promotion, FlashSaleConfig, MultiBuyConfig
from app.services.diagnostics import DiagnosticSink

if TYPE_CHECKING:
    from app.services.conflicts import Winners


HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PricingOptions:
    flash_price_tolerance: Decimal = Decimal("0.01")
    decimal_places: int = 2

    @property
    def quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.decimal_places)

    @classmethod
    def from_settings(cls, settings) -> "PricingOptions":
        return cls(
            flash_price_tolerance=settings.FLASH_PRICE_TOLERANCE,
            decimal_places=settings.CURRENCY_DECIMAL_PLACES,
        )


@dataclass(frozen=True)
class PriceBreakdown:
    effective_unit_price: Decimal
    total_discount: Decimal
    stock_limited: bool = False
    stock_limit: Optional[int] = None
    applied: List[Promotion] = field(default_factory=list)

    @property
    def applied_promotion_ids(self) -> List[str]:
        return [p.id for p in self.applied]


def round_money(amount: Decimal, options: PricingOptions) -> Decimal:
    """Округление half-up до минимальной единицы валюты"""
    return amount.quantize(options.quantum, rounding=ROUND_HALF_UP)


def flash_price_matches(config: FlashSaleConfig, unit_price: Decimal, options: PricingOptions) -> bool:
    """originalPrice акции совпадает с ценой каталога в пределах допуска"""
    return abs(config.original_price - unit_price) <= options.flash_price_tolerance


def multi_buy_reached(config: MultiBuyConfig, quantity: int) -> bool:
    return quantity >= config.threshold_quantity


def discount_magnitude(promotion: Promotion, unit_price: Decimal, quantity: int) -> Decimal:
    """Размер скидки одной акции на строку, без округления и без стекинга"""
    config = promotion.config
    if isinstance(config, FlashSaleConfig):
        return max(unit_price - config.flash_price, Decimal("0")) * quantity
    elif isinstance(config, MultiBuyConfig):
        if not multi_buy_reached(config, quantity):
            return Decimal("0")
        return unit_price * config.discount_percent / HUNDRED * quantity
    else:
        assert_never(config)


def price(
    winners: "Winners",
    unit_price: Decimal,
    quantity: int,
    options: PricingOptions = PricingOptions(),
    sink: Optional[DiagnosticSink] = None,
) -> PriceBreakdown:
    """
    Цена строки с учётом победителей.
    Flash-цена заменяет цену за единицу, multi-buy процент применяется
    поверх неё. Округляется только итог строки, один раз.
    """
    unit = unit_price
    applied = []
    stock_limit = None

    # Порядок важен: сначала flash, потом multi-buy поверх
    for promotion in (winners.flash_sale, winners.multi_buy):
        if promotion is None:
            continue
        config = promotion.config
        if isinstance(config, FlashSaleConfig):
            if not flash_price_matches(config, unit_price, options):
                if sink is not None:
                    sink.report(
                        "flash_price_mismatch",
                        f"originalPrice {config.original_price} vs unitPrice {unit_price}",
                        promotion.id,
                    )
                continue
            if config.flash_price >= unit:
                continue
            unit = config.flash_price
            stock_limit = config.stock_limit
            applied.append(promotion)
        elif isinstance(config, MultiBuyConfig):
            # Порог перепроверяется и здесь
            if not multi_buy_reached(config, quantity):
                continue
            unit = unit * (HUNDRED - config.discount_percent) / HUNDRED
            applied.append(promotion)
        else:
            assert_never(config)

    gross_total = round_money(unit_price * quantity, options)
    net_total = round_money(unit * quantity, options)

    return PriceBreakdown(
        effective_unit_price=round_money(net_total / quantity, options),
        total_discount=gross_total - net_total,
        stock_limited=stock_limit is not None,
        stock_limit=stock_limit,
        applied=applied,
    )
