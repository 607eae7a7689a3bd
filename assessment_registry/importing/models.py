"""Append-only audit record of import submissions."""

from __future__ import annotations

import uuid

from django.db import models

from .constants import ImportType


class ImportHistory(models.Model):
    import_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assessment_id = models.CharField(max_length=120, null=True, blank=True, db_index=True)
    import_type = models.CharField(max_length=16, choices=ImportType.choices)
    rows_processed = models.PositiveIntegerField(default=0)
    rows_created = models.PositiveIntegerField(default=0)
    rows_updated = models.PositiveIntegerField(default=0)
    rows_failed = models.PositiveIntegerField(default=0)
    change_note = models.TextField(null=True, blank=True)
    file_name = models.CharField(max_length=255, null=True, blank=True)
    imported_at = models.DateTimeField(db_index=True)
    imported_by = models.CharField(max_length=150)

    class Meta:
        app_label = "assessment_registry"
        db_table = "import_history"
        ordering = ["-imported_at"]
        indexes = [
            models.Index(
                fields=["assessment_id", "imported_at"],
                name="import_hist_assessm_3b9e0a_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.import_type} import @ {self.imported_at.isoformat()}"
