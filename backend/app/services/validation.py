from decimal import Decimal
from typing import Iterable, List, assert_never
from pydantic import ValidationError
from app.schemas.promotion import Promotion, FlashSaleConfig, MultiBuyConfig
from app.services.diagnostics import DiagnosticSink
from app.services.lifecycle import parse_instant


def validate_promotion(promotion: Promotion) -> List[str]:
    """Коды нарушенных инвариантов записи (пустой список = запись валидна)"""
    problems = []

    start = parse_instant(promotion.start_at)
    end = parse_instant(promotion.end_at)
    # Непарсящееся время обрабатывает lifecycle (ENDED), здесь не ошибка
    if start is not None and end is not None and start >= end:
        problems.append("invalid_window")

    if not promotion.channels:
        problems.append("empty_channels")

    if not promotion.scope.is_global and not promotion.scope.has_targets:
        problems.append("inert_scope")

    if promotion.type is not None and promotion.type.value != promotion.kind:
        problems.append("type_kind_mismatch")

    config = promotion.config
    if isinstance(config, FlashSaleConfig):
        if config.flash_price <= 0:
            problems.append("flash_price_not_positive")
        if config.flash_price >= config.original_price:
            problems.append("flash_price_not_below_original")
        if config.stock_limit is not None and config.stock_limit <= 0:
            problems.append("stock_limit_not_positive")
    elif isinstance(config, MultiBuyConfig):
        if config.threshold_quantity < 2:
            problems.append("threshold_below_two")
        if not (Decimal("0") < config.discount_percent <= Decimal("100")):
            problems.append("discount_percent_out_of_range")
    else:
        assert_never(config)

    return problems


def parse_snapshot(records: Iterable, sink: DiagnosticSink) -> List[Promotion]:
    """Сырые записи -> Promotion; структурно битые пропускаются с диагностикой"""
    promotions = []
    for raw in records:
        if isinstance(raw, Promotion):
            promotions.append(raw)
            continue
        try:
            promotions.append(Promotion.model_validate(raw))
        except ValidationError as exc:
            promotion_id = raw.get("id") if isinstance(raw, dict) else None
            sink.report(
                "malformed_record",
                f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}",
                str(promotion_id) if promotion_id is not None else None,
            )
    return promotions
