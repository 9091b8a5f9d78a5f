"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on Django ORM directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the entity managed by the
    repository (e.g. ``Product``).
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> T:
        """Persist a new entity built from ``data``."""

    @abstractmethod
    def find_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""

    @abstractmethod
    def update(self, id: str, data: Dict[str, Any]) -> Optional[T]:
        """Apply a partial update. Returns ``None`` if the entity is missing."""

    @abstractmethod
    def hard_delete(self, id: str) -> bool:
        """Permanently remove an entity by ID."""
