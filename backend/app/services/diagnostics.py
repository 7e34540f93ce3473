"""
Приёмники диагностики движка акций.

Пайплайн не пишет в глобальный логгер напрямую: приёмник передаётся
аргументом, поэтому оценку можно гонять в тестах без побочных эффектов.
"""
import logging
from typing import List, Optional, Protocol
from app.schemas.promotion import Diagnostic

logger = logging.getLogger(__name__)


class DiagnosticSink(Protocol):
    def report(self, code: str, message: str, promotion_id: Optional[str] = None) -> None:
        ...


class LoggingSink:
    """Пишет диагностику в logging"""

    def __init__(self, log: logging.Logger = logger):
        self._log = log

    def report(self, code: str, message: str, promotion_id: Optional[str] = None) -> None:
        self._log.warning("promotion=%s code=%s %s", promotion_id or "-", code, message)


class CollectingSink:
    """Собирает диагностику в список"""

    def __init__(self):
        self.items: List[Diagnostic] = []

    def report(self, code: str, message: str, promotion_id: Optional[str] = None) -> None:
        self.items.append(Diagnostic(code=code, message=message, promotion_id=promotion_id))

    @property
    def codes(self) -> List[str]:
        return [d.code for d in self.items]


class TeeSink:
    def __init__(self, *sinks: DiagnosticSink):
        self._sinks = sinks

    def report(self, code: str, message: str, promotion_id: Optional[str] = None) -> None:
        for sink in self._sinks:
            sink.report(code, message, promotion_id)
