"""ExportService — record to normalized JSON document.

Pipeline: LOOKUP → EXPORT FIELDS → ASSEMBLE → NOTIFY

Each custom field goes through its handler, or through the host's native
serializer when the handler allows it and the setting is on. A field that
fails to export is logged and left out; it never aborts the export.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog

from entryport.domain.documents import ExportDocument, ExportMetadata
from entryport.domain.fields import RESERVED_HANDLES
from entryport.domain.records import Record
from entryport.handlers.base import OMIT
from entryport.handlers.registry import NoHandlerFoundError
from entryport.services.base import BaseService
from entryport.services.errors import ErrorCode
from entryport.services.result import ServiceResult, failure
from entryport.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class ExportService(BaseService):
    """Builds export documents from records in the content store."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def export_by_id(self, record_id: int, *, site_id: int | None = None) -> ServiceResult:
        """Export the record with *record_id* (first site when *site_id* is None)."""
        record = self._store.find_record(record_id, site_id)
        if record is None:
            return failure(
                "export_entry",
                ErrorCode.NOT_FOUND,
                f"Entry not found: {record_id}",
                entry_id=record_id,
                site_id=site_id,
            )
        return self._export(record)

    @traced
    def export_by_path(self, path_or_slug: str, *, site_id: int | None = None) -> ServiceResult:
        """Export the record whose slug or URI matches *path_or_slug*."""
        record = self._store.find_record_by_path(path_or_slug, site_id)
        if record is None:
            return failure(
                "export_entry",
                ErrorCode.NOT_FOUND,
                f"Entry not found: {path_or_slug}",
                path=path_or_slug,
                site_id=site_id,
            )
        return self._export(record)

    @traced
    def export_record(self, record: Record) -> ServiceResult:
        """Export an already-loaded record."""
        return self._export(record)

    def build_document(
        self, record: Record, warnings: list[str] | None = None
    ) -> ExportDocument:
        """Assemble the export document for *record*.

        Field-level failures are appended to *warnings* when given.
        """
        sink = warnings if warnings is not None else []
        return ExportDocument(
            metadata=ExportMetadata(id=record.id, site_id=record.site_id),
            title=record.title or "",
            fields=self._export_fields(record, sink),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _export(self, record: Record) -> ServiceResult:
        op = "export_entry"
        warnings: list[str] = []

        with structlog.contextvars.bound_contextvars(record_id=record.id, site_id=record.site_id):
            with trace_span("export_fields") as span:
                document = self.build_document(record, warnings)
                if span:
                    span.annotate("fields", len(document.fields))

        self._dispatch_event(
            "post_export",
            {
                "record_id": record.id,
                "site_id": record.site_id,
                "fields": list(document.fields),
            },
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": record.id,
                "site_id": record.site_id,
                "title": document.title,
                "field_count": len(document.fields),
                "document": [document.to_wire()],
            },
            warnings=warnings,
        )

    def _export_fields(self, record: Record, warnings: list[str]) -> dict[str, Any]:
        native_values = self._native_values(record)

        fields: dict[str, Any] = {}
        for field in self._store.get_field_schema(record):
            handle = field.handle
            if handle in RESERVED_HANDLES:
                logger.warning("Field handle %r collides with a record property; skipped", handle)
                warnings.append(f"Field '{handle}' skipped: reserved handle")
                continue
            try:
                value = self._exported_value(record, field, native_values)
            except NoHandlerFoundError:
                raise
            except Exception as exc:
                logger.warning("Failed to export field %s", handle, exc_info=True)
                warnings.append(f"Failed to export field '{handle}': {exc}")
                continue

            if value is OMIT:
                logger.debug("Field %s has no representable value; omitted", handle)
                continue
            fields[handle] = value
        return fields
