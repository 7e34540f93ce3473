"""
Оценка акций для одной строки корзины.

Чистая функция от (context, snapshot, now): снапшот фильтруется по
мерчанту, статусу, scope и каналу, конфликты разрешаются по видам,
победители передаются в расчёт цены. Любая проблема с отдельной акцией
превращается в диагностику, а худший исход для вызывающего - цена без
скидки.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional
from app.schemas.promotion import (
    EvaluationContext,
    EvaluationResult,
    FlashSaleConfig,
    Promotion,
    PromotionStatus,
)
from app.services.channels import admit
from app.services.conflicts import Candidate, resolve
from app.services.diagnostics import CollectingSink, DiagnosticSink, TeeSink
from app.services.lifecycle import classify, parse_instant, utcnow
from app.services.pricing import PricingOptions, flash_price_matches, price, round_money
from app.services.scope import match_scope
from app.services.validation import parse_snapshot, validate_promotion

logger = logging.getLogger(__name__)


def _candidate(
    promotion: Promotion,
    context: EvaluationContext,
    now: datetime,
    options: PricingOptions,
    sink: DiagnosticSink,
) -> Optional[Candidate]:
    problems = validate_promotion(promotion)
    if problems:
        sink.report("invalid_record", ", ".join(problems), promotion.id)
        return None

    if parse_instant(promotion.start_at) is None or parse_instant(promotion.end_at) is None:
        sink.report(
            "unparseable_window",
            f"startAt={promotion.start_at!r} endAt={promotion.end_at!r}, treated as ENDED",
            promotion.id,
        )

    if classify(promotion.start_at, promotion.end_at, now) != PromotionStatus.ACTIVE:
        return None

    level = match_scope(promotion.scope, context)
    if level is None:
        return None

    if not admit(promotion, context):
        return None

    config = promotion.config
    if isinstance(config, FlashSaleConfig) and not flash_price_matches(config, context.unit_price, options):
        sink.report(
            "flash_price_mismatch",
            f"originalPrice {config.original_price} vs unitPrice {context.unit_price}",
            promotion.id,
        )
        return None

    return Candidate(promotion=promotion, level=level)


def _no_discount(context: EvaluationContext, collector: CollectingSink, options: PricingOptions) -> EvaluationResult:
    return EvaluationResult(
        effective_unit_price=round_money(context.unit_price, options),
        total_discount=round_money(Decimal("0"), options),
        diagnostics=list(collector.items),
    )


def evaluate(
    context: EvaluationContext,
    snapshot: Iterable,
    now: Optional[datetime] = None,
    sink: Optional[DiagnosticSink] = None,
    options: PricingOptions = PricingOptions(),
) -> EvaluationResult:
    """Рассчитать эффективную цену строки по снапшоту акций"""
    collector = CollectingSink()
    report_to = TeeSink(collector, sink) if sink is not None else collector
    now = now or context.now or utcnow()

    try:
        promotions = parse_snapshot(snapshot, report_to)

        candidates: List[Candidate] = []
        for promotion in promotions:
            if promotion.merchant_id != context.merchant_id:
                continue
            try:
                candidate = _candidate(promotion, context, now, options, report_to)
            except Exception as exc:
                report_to.report("evaluation_failed", repr(exc), promotion.id)
                continue
            if candidate is not None:
                candidates.append(candidate)

        winners = resolve(candidates, context.unit_price, context.quantity)
        breakdown = price(winners, context.unit_price, context.quantity, options, report_to)
    except Exception:
        logger.exception("Promotion evaluation failed for merchant=%s product=%s",
                         context.merchant_id, context.product_id)
        return _no_discount(context, collector, options)

    return EvaluationResult(
        effective_unit_price=breakdown.effective_unit_price,
        total_discount=breakdown.total_discount,
        applied_promotion_ids=breakdown.applied_promotion_ids,
        stock_limited=breakdown.stock_limited,
        stock_limit=breakdown.stock_limit,
        display_rules=[p.human_readable_rule for p in breakdown.applied],
        diagnostics=list(collector.items),
    )
