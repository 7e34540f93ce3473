from .promotion import (
    Promotion, PromotionScope, PromotionType, PromotionStatus, Channel,
    FlashSaleConfig, MultiBuyConfig,
    EvaluationContext, EvaluationResult, Diagnostic, PromotionStatusItem,
)

__all__ = [
    "Promotion", "PromotionScope", "PromotionType", "PromotionStatus", "Channel",
    "FlashSaleConfig", "MultiBuyConfig",
    "EvaluationContext", "EvaluationResult", "Diagnostic", "PromotionStatusItem",
]
