"""
Источники снапшотов акций.

Хранилище отдаёт сырые записи мерчанта; инварианты движок проверяет сам.
"""
import asyncio
import logging
from typing import List, Optional, Protocol
import httpx
from sqlalchemy.engine import Engine
from sqlmodel import Session, select
from app.models.promotion import PromotionRecord
from app.services.errors import PromotionStoreError

logger = logging.getLogger(__name__)


class PromotionStore(Protocol):
    async def list_active(self, merchant_id: str) -> List[dict]:
        ...


class SqlPromotionStore:
    """Акции из собственной таблицы promotions"""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _fetch(self, merchant_id: str) -> List[dict]:
        with Session(self.engine) as session:
            stmt = (
                select(PromotionRecord)
                .where(PromotionRecord.merchant_id == merchant_id)
                .order_by(PromotionRecord.id)
            )
            return [record.to_snapshot() for record in session.exec(stmt).all()]

    async def list_active(self, merchant_id: str) -> List[dict]:
        try:
            return await asyncio.to_thread(self._fetch, merchant_id)
        except Exception as exc:
            raise PromotionStoreError(f"Database read failed for merchant {merchant_id}") from exc


class HttpPromotionStore:
    """Акции с бэкенда мерчанта (GET /api/merchant/promotions)"""

    PATH = "/api/merchant/promotions"

    def __init__(
        self,
        base_url: str,
        admin_key: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.admin_key = admin_key
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def list_active(self, merchant_id: str) -> List[dict]:
        url = f"{self.base_url}{self.PATH}"
        try:
            resp = await self.client.get(
                url,
                params={"merchantId": merchant_id},
                headers={"X-ADMIN-KEY": self.admin_key},
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            raise PromotionStoreError(f"Promotions backend request failed: {exc}") from exc
        except ValueError as exc:
            raise PromotionStoreError("Promotions backend returned invalid JSON") from exc

        if isinstance(data, dict):
            data = data.get("promotions")
        if not isinstance(data, list):
            raise PromotionStoreError("Unexpected promotions payload shape")
        return data

    async def aclose(self) -> None:
        await self.client.aclose()
