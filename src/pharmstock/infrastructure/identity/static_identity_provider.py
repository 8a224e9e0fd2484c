"""IdentityProvider backed by a fixed, configured actor."""

from __future__ import annotations

from pharmstock.domain.model.value_objects import Actor
from pharmstock.domain.port.identity_provider import IdentityProvider


class StaticIdentityProvider(IdentityProvider):
    """Always reports the same actor; ``None`` means nobody is signed in."""

    def __init__(self, actor: Actor | None) -> None:
        self._actor = actor

    def current_actor(self) -> Actor | None:
        return self._actor
