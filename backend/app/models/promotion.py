from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional, List
from datetime import datetime


class PromotionRecord(SQLModel, table=True):
    __tablename__ = "promotions"

    id: str = Field(primary_key=True)
    merchant_id: str = Field(index=True)

    name: str
    description: Optional[str] = None
    type: str  # FLASH_SALE | MULTI_BUY_DISCOUNT

    # ISO-строки как есть, валидирует движок
    start_at: str
    end_at: str

    channels: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    scope: dict = Field(default_factory=dict, sa_column=Column(JSON))
    promotion_config: dict = Field(default_factory=dict, sa_column=Column(JSON))

    expose_to_creators: bool = Field(default=False)
    allowed_creator_ids: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))

    human_readable_rule: str = ""

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def to_snapshot(self) -> dict:
        """Запись в формате, который понимает движок"""
        return {
            "id": self.id,
            "merchantId": self.merchant_id,
            "name": self.name,
            "description": self.description,
            "type": self.type or None,
            "startAt": self.start_at,
            "endAt": self.end_at,
            "channels": list(self.channels or []),
            "scope": dict(self.scope or {}),
            "config": dict(self.promotion_config or {}),
            "exposeToCreators": self.expose_to_creators,
            "allowedCreatorIds": self.allowed_creator_ids,
            "humanReadableRule": self.human_readable_rule,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
