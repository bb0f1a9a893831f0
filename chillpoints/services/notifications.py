from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal


logger = logging.getLogger(__name__)

ToastVariant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Toast:
    title: str
    description: str = ""
    variant: ToastVariant = "default"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Transient user notifications, drained by whoever renders them."""

    def __init__(self, max_pending: int = 20):
        self._pending: deque[Toast] = deque(maxlen=max_pending)
        self._lock = threading.Lock()

    def toast(self, title: str, description: str = "", variant: ToastVariant = "default") -> Toast:
        item = Toast(title=title, description=description, variant=variant)
        with self._lock:
            self._pending.append(item)

        log = logger.warning if variant == "destructive" else logger.info
        log("toast", extra={"title": title, "variant": variant})
        return item

    def pending(self) -> list[Toast]:
        with self._lock:
            return list(self._pending)

    def drain(self) -> list[Toast]:
        with self._lock:
            items = list(self._pending)
            self._pending.clear()
        return items
