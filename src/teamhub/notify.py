from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
import threading
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    level: str  # "error" / "warning" / "info"
    message: str
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class Notifier:
    """Collects non-blocking user notices (the dashboard's toasts)."""

    def __init__(self, on_notice: Optional[Callable[[Notice], None]] = None) -> None:
        self._on_notice = on_notice
        self._lock = threading.Lock()
        self._notices: List[Notice] = []

    @property
    def notices(self) -> List[Notice]:
        with self._lock:
            return list(self._notices)

    def notify(self, level: str, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        logger.log(logging.ERROR if level == "error" else logging.WARNING if level == "warning" else logging.INFO, message)
        with self._lock:
            self._notices.append(notice)
        if self._on_notice is not None:
            self._on_notice(notice)
        return notice

    def error(self, message: str) -> Notice:
        return self.notify("error", message)

    def warning(self, message: str) -> Notice:
        return self.notify("warning", message)

    def clear(self) -> None:
        with self._lock:
            self._notices.clear()
