from datetime import datetime, timezone
from typing import Optional
from app.schemas.promotion import Promotion, PromotionStatus


def parse_instant(value) -> Optional[datetime]:
    """ISO-строка -> aware datetime (UTC для naive), None если не парсится"""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def classify(start_at, end_at, now: datetime) -> PromotionStatus:
    """
    Статус окна акции относительно now.
    Обе границы включительно; непарсящееся окно считается завершённым.
    """
    start = parse_instant(start_at)
    end = parse_instant(end_at)
    if start is None or end is None:
        return PromotionStatus.ENDED

    now = parse_instant(now)
    if now < start:
        return PromotionStatus.UPCOMING
    if now > end:
        return PromotionStatus.ENDED
    return PromotionStatus.ACTIVE


def compute_promotion_status(promotion: Promotion, now: Optional[datetime] = None) -> PromotionStatus:
    return classify(promotion.start_at, promotion.end_at, now or utcnow())
