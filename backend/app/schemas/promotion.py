from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Tuple, Union, Literal, Annotated
from datetime import datetime
from decimal import Decimal
from enum import Enum


class PromotionType(str, Enum):
    FLASH_SALE = "FLASH_SALE"
    MULTI_BUY_DISCOUNT = "MULTI_BUY_DISCOUNT"


class Channel(str, Enum):
    WEB = "web"
    APP = "app"
    CREATOR_AGENTS = "creator_agents"


class PromotionStatus(str, Enum):
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    ENDED = "ENDED"


class _Frozen(BaseModel):
    """Неизменяемая модель, camelCase на проводе"""

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel
        coerce_numbers_to_str = True


class PromotionScope(_Frozen):
    merchant_ids: Optional[Tuple[str, ...]] = None
    product_ids: Optional[Tuple[str, ...]] = None
    category_ids: Optional[Tuple[str, ...]] = None
    brand_ids: Optional[Tuple[str, ...]] = None
    is_global: bool = Field(default=False, alias="global")

    @property
    def has_targets(self) -> bool:
        return any((self.merchant_ids, self.product_ids, self.category_ids, self.brand_ids))


class FlashSaleConfig(_Frozen):
    kind: Literal["FLASH_SALE"] = "FLASH_SALE"
    flash_price: Decimal
    original_price: Decimal
    stock_limit: Optional[int] = None


class MultiBuyConfig(_Frozen):
    kind: Literal["MULTI_BUY_DISCOUNT"] = "MULTI_BUY_DISCOUNT"
    threshold_quantity: int
    discount_percent: Decimal


PromotionConfig = Annotated[Union[FlashSaleConfig, MultiBuyConfig], Field(discriminator="kind")]


class Promotion(_Frozen):
    """Снимок акции в том виде, в каком его отдаёт хранилище"""
    id: str
    merchant_id: str

    name: str
    description: Optional[str] = None
    type: Optional[PromotionType] = None

    # Храним как строки: непарсящееся время не должно ронять снапшот
    start_at: str
    end_at: str

    channels: Tuple[str, ...] = ()
    scope: PromotionScope = PromotionScope()
    config: PromotionConfig

    expose_to_creators: bool = False
    allowed_creator_ids: Optional[Tuple[str, ...]] = None

    human_readable_rule: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("start_at", "end_at", "created_at", "updated_at", mode="before")
    @classmethod
    def _instant_to_str(cls, value):
        if isinstance(value, datetime):
            return value.isoformat()
        return value

    @property
    def kind(self) -> str:
        return self.config.kind


class EvaluationContext(_Frozen):
    """Контекст одной строки корзины"""
    merchant_id: str
    product_id: str
    category_ids: Tuple[str, ...] = ()
    brand_id: Optional[str] = None
    channel: Channel
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(gt=0)
    is_creator_agent: bool = False
    creator_id: Optional[str] = None
    now: Optional[datetime] = None


class Diagnostic(_Frozen):
    code: str
    message: str
    promotion_id: Optional[str] = None


class EvaluationResult(_Frozen):
    effective_unit_price: Decimal
    total_discount: Decimal
    applied_promotion_ids: List[str] = []
    stock_limited: bool = False
    stock_limit: Optional[int] = None
    display_rules: List[str] = []
    diagnostics: List[Diagnostic] = []


class PromotionStatusItem(_Frozen):
    id: str
    name: str
    kind: str
    status: PromotionStatus
    problems: List[str] = []
    human_readable_rule: str = ""
