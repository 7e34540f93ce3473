from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from datetime import datetime
from app.api.deps import get_snapshot_cache, get_pricing_options
from app.schemas.promotion import EvaluationContext, EvaluationResult, PromotionStatusItem
from app.services.diagnostics import LoggingSink
from app.services.evaluation import evaluate
from app.services.lifecycle import compute_promotion_status
from app.services.pricing import PricingOptions
from app.services.snapshot_cache import SnapshotCache
from app.services.validation import validate_promotion

router = APIRouter(prefix="/api/promotions", tags=["promotions"])


@router.post("/evaluate", response_model=EvaluationResult)
async def evaluate_line_item(
    context: EvaluationContext,
    cache: SnapshotCache = Depends(get_snapshot_cache),
    options: PricingOptions = Depends(get_pricing_options),
):
    """Цена строки корзины с учётом акций"""
    snapshot = await cache.get(context.merchant_id)
    return evaluate(context, snapshot, sink=LoggingSink(), options=options)


@router.get("/status", response_model=List[PromotionStatusItem])
async def list_promotion_statuses(
    merchant_id: str = Query(..., alias="merchantId"),
    now: Optional[datetime] = Query(None),
    cache: SnapshotCache = Depends(get_snapshot_cache),
):
    """Акции мерчанта с вычисленным статусом и проблемами записи"""
    snapshot = await cache.get(merchant_id)
    return [
        PromotionStatusItem(
            id=promo.id,
            name=promo.name,
            kind=promo.kind,
            status=compute_promotion_status(promo, now),
            problems=validate_promotion(promo),
            human_readable_rule=promo.human_readable_rule,
        )
        for promo in snapshot
        if promo.merchant_id == merchant_id
    ]
