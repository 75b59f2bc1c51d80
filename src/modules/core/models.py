"""Base abstract models for the catalog.

Provides ``VersionedModel``: integer primary key, audit timestamps and
an optimistic-locking ``version`` counter.

Design decisions:
- Timestamps are plain fields (no ``auto_now`` / ``auto_now_add``).
  Repositories assign them at insert/update time so the semantics do
  not depend on ORM lifecycle hooks.
- ``version`` is only ever advanced by repositories, inside the same
  conditional ``UPDATE`` that writes the row.
"""

from __future__ import annotations

from django.db import models

INITIAL_VERSION = 0


class VersionedModel(models.Model):
    """Abstract base with timestamp bookkeeping and a version counter."""

    id = models.BigAutoField(primary_key=True)
    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField()
    version = models.PositiveBigIntegerField(default=INITIAL_VERSION)

    class Meta:
        abstract = True
