"""LowStockNotifier that stores alerts as back-office notifications.

Alerts land in ``notifications.json`` as unread ``inventory``
notifications, which the dashboard's notification bell reads.
"""

from __future__ import annotations

import uuid
from pathlib import Path

import structlog

from pharmstock.domain.clock import Clock, utc_now
from pharmstock.domain.model.alerts import LowStockAlert
from pharmstock.domain.port.low_stock_notifier import LowStockNotifier
from pharmstock.infrastructure.persistence.file_lock import lock_for
from pharmstock.infrastructure.persistence.json_file import (
    ensure_file,
    load_records,
    persist_records,
)

logger = structlog.get_logger(__name__)


class JsonLowStockNotifier(LowStockNotifier):

    def __init__(self, file_path: Path, clock: Clock = utc_now) -> None:
        self._file_path = file_path
        self._lock = lock_for(file_path)
        self._clock = clock
        ensure_file(file_path, self._lock)

    def notify(self, alert: LowStockAlert) -> None:
        record = {
            "id": uuid.uuid4().hex,
            "type": "inventory",
            "title": "Low Stock Alert",
            "message": alert.message,
            "is_read": False,
            "created_at": self._clock().isoformat(),
            "metadata": {
                "product_id": alert.product_id,
                "product_name": alert.product_name,
                "current_stock": alert.current_stock,
                "min_stock_level": alert.min_stock_level,
                "related_id": alert.product_id,
                "type": "low_stock",
            },
        }
        with self._lock:
            records = load_records(self._file_path)
            records.append(record)
            persist_records(self._file_path, records)
        logger.info("low_stock_alert_stored", product_id=alert.product_id)

    def list_unread(self) -> list[dict]:
        with self._lock:
            return [r for r in load_records(self._file_path) if not r.get("is_read")]
