"""Outbound port for low-stock notifications."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pharmstock.domain.model.alerts import LowStockAlert


class LowStockNotifier(ABC):

    @abstractmethod
    def notify(self, alert: LowStockAlert) -> None:
        """Deliver one alert. Fire-and-forget; callers never retry."""
