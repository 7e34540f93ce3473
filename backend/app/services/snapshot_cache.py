"""
Кэш снапшотов акций по мерчанту.

- на мерчанта не больше одного обновления одновременно: задача обновления
  хранится в словаре и общая для всех ожидающих
- устаревший снапшот отдаётся сразу, обновление идёт в фоне
- число мерчантов в кэше ограничено, давно не запрошенные вытесняются (LRU)
- ошибка, таймаут или отмена обновления -> последний удачный снапшот,
  а если его нет -> пустой (ни одной акции, то есть без скидок)
"""
import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple
from app.schemas.promotion import Promotion
from app.services.diagnostics import DiagnosticSink, LoggingSink
from app.services.store import PromotionStore
from app.services.validation import parse_snapshot

logger = logging.getLogger(__name__)

Snapshot = Tuple[Promotion, ...]


@dataclass(frozen=True)
class _Entry:
    snapshot: Snapshot
    fetched_at: float


class SnapshotCache:
    def __init__(
        self,
        store: PromotionStore,
        ttl_seconds: float = 30.0,
        timeout_seconds: float = 5.0,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
        sink: Optional[DiagnosticSink] = None,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.timeout_seconds = timeout_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._sink = sink or LoggingSink(logger)
        self._entries: "OrderedDict[str, _Entry]" = OrderedDict()
        self._inflight: Dict[str, asyncio.Task] = {}

    def _is_fresh(self, entry: _Entry) -> bool:
        return self._clock() - entry.fetched_at < self.ttl_seconds

    def _fallback(self, merchant_id: str) -> Snapshot:
        entry = self._entries.get(merchant_id)
        return entry.snapshot if entry else ()

    async def get(self, merchant_id: str) -> Snapshot:
        """Снапшот мерчанта: свежий, устаревший (с фоновым обновлением) или после загрузки"""
        entry = self._entries.get(merchant_id)
        if entry is not None:
            self._entries.move_to_end(merchant_id)
        if entry is not None and self._is_fresh(entry):
            return entry.snapshot

        task = self.refresh(merchant_id)
        if entry is not None:
            return entry.snapshot

        # shield: отмена одного ожидающего не отменяет общее обновление
        return await asyncio.shield(task)

    def refresh(self, merchant_id: str) -> asyncio.Task:
        """Запустить обновление или вернуть уже идущее"""
        task = self._inflight.get(merchant_id)
        if task is not None and not task.done():
            return task

        task = asyncio.get_running_loop().create_task(self._refresh(merchant_id))
        self._inflight[merchant_id] = task
        task.add_done_callback(lambda t, key=merchant_id: self._forget(key, t))
        return task

    def _forget(self, merchant_id: str, task: asyncio.Task) -> None:
        if self._inflight.get(merchant_id) is task:
            del self._inflight[merchant_id]

    async def _refresh(self, merchant_id: str) -> Snapshot:
        try:
            records = await asyncio.wait_for(
                self.store.list_active(merchant_id), timeout=self.timeout_seconds
            )
            snapshot = tuple(parse_snapshot(records, self._sink))
        except asyncio.TimeoutError:
            logger.warning("Promotion snapshot fetch timed out for merchant=%s, serving fallback", merchant_id)
            return self._fallback(merchant_id)
        except asyncio.CancelledError:
            logger.warning("Promotion snapshot fetch cancelled for merchant=%s, serving fallback", merchant_id)
            return self._fallback(merchant_id)
        except Exception as exc:
            logger.warning("Promotion snapshot fetch failed for merchant=%s: %s, serving fallback", merchant_id, exc)
            return self._fallback(merchant_id)

        self._store_entry(merchant_id, _Entry(snapshot=snapshot, fetched_at=self._clock()))
        logger.debug("Promotion snapshot refreshed for merchant=%s (%d records)", merchant_id, len(snapshot))
        return snapshot

    def _store_entry(self, merchant_id: str, entry: _Entry) -> None:
        self._entries[merchant_id] = entry
        self._entries.move_to_end(merchant_id)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Promotion snapshot evicted for merchant=%s", evicted)

    def __len__(self) -> int:
        return len(self._entries)

    def invalidate(self, merchant_id: str) -> None:
        self._entries.pop(merchant_id, None)

    def is_refreshing(self, merchant_id: str) -> bool:
        task = self._inflight.get(merchant_id)
        return task is not None and not task.done()

    async def aclose(self) -> None:
        tasks = list(self._inflight.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._inflight.clear()
