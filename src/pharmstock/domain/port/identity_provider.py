"""Outbound port that tells the ledger who is acting."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pharmstock.domain.model.value_objects import Actor


class IdentityProvider(ABC):

    @abstractmethod
    def current_actor(self) -> Actor | None:
        """Return the acting user, or None if nobody is signed in."""
