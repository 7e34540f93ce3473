from app.schemas.promotion import Promotion, EvaluationContext


def admit(promotion: Promotion, context: EvaluationContext) -> bool:
    """Пропускает ли акция канал запроса и (для агентов) креатора"""
    if context.channel not in promotion.channels:
        return False

    if not context.is_creator_agent:
        return True

    if not promotion.expose_to_creators:
        return False
    if promotion.allowed_creator_ids:
        return context.creator_id is not None and context.creator_id in promotion.allowed_creator_ids
    return True
