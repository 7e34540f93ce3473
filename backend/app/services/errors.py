class PromotionEngineError(Exception):
    """Базовая ошибка движка акций"""


class PromotionStoreError(PromotionEngineError):
    """Хранилище акций недоступно или вернуло мусор"""
