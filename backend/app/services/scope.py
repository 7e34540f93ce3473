from enum import IntEnum
from typing import Optional
from app.schemas.promotion import PromotionScope, EvaluationContext


class MatchLevel(IntEnum):
    """Специфичность совпадения: выше = конкретнее"""
    GLOBAL = 1
    MERCHANT = 2
    BRAND = 3
    CATEGORY = 4
    PRODUCT = 5


def match_scope(scope: PromotionScope, context: EvaluationContext) -> Optional[MatchLevel]:
    """
    Сопоставить scope акции с товаром.
    Global-акция всегда совпадает на уровне GLOBAL, даже если в ней
    перечислены id. Иначе измерения независимы (OR), уровень = самое
    конкретное совпавшее. Пустой scope без global не совпадает ни с чем.
    """
    if scope.is_global:
        return MatchLevel.GLOBAL
    if scope.product_ids and context.product_id in scope.product_ids:
        return MatchLevel.PRODUCT
    if scope.category_ids and set(context.category_ids) & set(scope.category_ids):
        return MatchLevel.CATEGORY
    if scope.brand_ids and context.brand_id is not None and context.brand_id in scope.brand_ids:
        return MatchLevel.BRAND
    if scope.merchant_ids and context.merchant_id in scope.merchant_ids:
        return MatchLevel.MERCHANT
    return None
