from .promotion import PromotionRecord

__all__ = [
    "PromotionRecord",
]
