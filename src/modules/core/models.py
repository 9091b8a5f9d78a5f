"""Base abstract models for the inventory service.

Provides:
- ``BaseModel``: UUIDv7 primary key + created_at / updated_at timestamps.
- ``SoftDeleteModel``: Extends BaseModel with soft-delete via ``is_active``.

Design decisions:
- ``objects`` manager returns ALL records (unfiltered).  Use ``.active()``
  explicitly to exclude soft-deleted rows.
- ``save()`` guard ensures ``updated_at`` is included when ``update_fields``
  is specified (Django skips ``auto_now`` fields otherwise).
"""

from __future__ import annotations

import uuid6
from django.db import models

# ---------------------------------------------------------------------------
# BaseModel
# ---------------------------------------------------------------------------


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Soft Delete infrastructure
# ---------------------------------------------------------------------------


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet with soft-delete helpers."""

    def active(self) -> SoftDeleteQuerySet:
        """Return only records that were not soft-deleted."""
        return self.filter(is_active=True)

    def inactive(self) -> SoftDeleteQuerySet:
        """Return only soft-deleted records."""
        return self.filter(is_active=False)


class SoftDeleteManager(models.Manager):
    """Manager that exposes ``.active()`` / ``.inactive()`` on the queryset."""

    def get_queryset(self) -> SoftDeleteQuerySet:
        return SoftDeleteQuerySet(self.model, using=self._db)

    def active(self) -> SoftDeleteQuerySet:
        return self.get_queryset().active()

    def inactive(self) -> SoftDeleteQuerySet:
        return self.get_queryset().inactive()


class SoftDeleteModel(BaseModel):
    """Abstract model with soft-delete via an ``is_active`` flag.

    - ``objects`` is **unfiltered** (returns all rows).
    - Use ``Model.objects.active()`` to exclude soft-deleted rows.
    - ``soft_delete()`` flips the flag; ``delete()`` removes physically.
    """

    is_active = models.BooleanField(default=True, db_index=True)

    objects = SoftDeleteManager()

    class Meta:
        abstract = True

    def soft_delete(self) -> bool:
        """Mark this instance inactive. Returns ``False`` if it already was."""
        if not self.is_active:
            return False
        self.is_active = False
        self.save(update_fields=["is_active"])
        return True
