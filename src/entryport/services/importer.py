"""ImportService — merge an edited export document back into a draft.

Pipeline: VALIDATE → LOOKUP → DETECT CHANGES → DRAFT → APPLY → PERSIST → RESPOND

Only fields present in the payload are considered; absence means "leave
untouched", never "clear". When nothing changed no draft is created.
Field-level failures are logged, reported as warnings, and skip the field;
bad input, a missing record, and a rejected draft end the call.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from entryport.domain.documents import ImportMetadata, ImportResult
from entryport.domain.fields import RESERVED_HANDLES, Field, ValidationScenario
from entryport.domain.records import Record
from entryport.handlers.base import OMIT, ImportContext
from entryport.handlers.registry import NoHandlerFoundError
from entryport.services.base import BaseService
from entryport.services.errors import ErrorCode
from entryport.services.result import ServiceError, ServiceResult, failure
from entryport.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)

OP = "import_entry"

# Record properties set directly on the draft rather than through a handler.
NATIVE_PROPERTIES = ("title",)


class ImportService(BaseService):
    """Applies changed fields of an import document to a new draft."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def import_json(self, raw: str | bytes, *, acting_user_id: int | None = None) -> ServiceResult:
        """Decode *raw* JSON and import it."""
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            return failure(OP, ErrorCode.BAD_INPUT, f"Invalid JSON format: {exc}")
        return self._import(payload, acting_user_id)

    @traced
    def import_record(self, payload: Any, *, acting_user_id: int | None = None) -> ServiceResult:
        """Import a decoded document (a dict, or a one-element list holding one)."""
        return self._import(payload, acting_user_id)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _import(self, payload: Any, acting_user_id: int | None) -> ServiceResult:
        warnings: list[str] = []

        # ── VALIDATE ─────────────────────────────────────────
        if not payload:
            return failure(OP, ErrorCode.BAD_INPUT, "No import data provided")
        if isinstance(payload, list) and len(payload) == 1 and isinstance(payload[0], Mapping):
            payload = payload[0]
        if not isinstance(payload, Mapping):
            return failure(OP, ErrorCode.BAD_INPUT, "Import data must be a single JSON object")

        raw_metadata = payload.get("metadata")
        if not isinstance(raw_metadata, Mapping) or raw_metadata.get("id") is None:
            return failure(OP, ErrorCode.BAD_INPUT, "Entry ID not found in import data")
        try:
            metadata = ImportMetadata.model_validate(raw_metadata)
        except ValidationError as exc:
            return failure(
                OP,
                ErrorCode.BAD_INPUT,
                "Invalid import metadata",
                errors=exc.errors(include_url=False, include_context=False),
            )
        site_id = metadata.site_id or self._workspace.settings.drafts.default_site_id

        # ── LOOKUP ───────────────────────────────────────────
        record = self._store.find_record(metadata.id, site_id)
        if record is None:
            return failure(
                OP,
                ErrorCode.NOT_FOUND,
                f"Entry not found: {metadata.id}",
                entry_id=metadata.id,
                site_id=site_id,
            )

        with structlog.contextvars.bound_contextvars(record_id=record.id, site_id=site_id):
            return self._merge(record, payload, acting_user_id, warnings)

    def _merge(
        self,
        record: Record,
        payload: Mapping[str, Any],
        acting_user_id: int | None,
        warnings: list[str],
    ) -> ServiceResult:
        schema = {field.handle: field for field in self._store.get_field_schema(record)}
        for key in payload:
            if key not in RESERVED_HANDLES and key not in schema:
                logger.debug("Ignoring unknown field %r", key)
                warnings.append(f"Unknown field '{key}' ignored")

        # ── DETECT CHANGES ───────────────────────────────────
        with trace_span("detect_changes") as span:
            changed = self._detect_changes(record, payload, schema, warnings)
            if span:
                span.annotate("changed", len(changed))

        if not changed:
            logger.info("No changes detected for entry %s", record.id)
            return ServiceResult(
                ok=True,
                op=OP,
                data=ImportResult.unchanged(record.id).to_wire(),
                warnings=warnings,
            )

        # ── DRAFT ────────────────────────────────────────────
        user_id = acting_user_id or self._workspace.settings.drafts.acting_user_id
        draft = self._store.create_draft(record, user_id)
        draft.scenario = ValidationScenario.ESSENTIALS

        # ── APPLY ────────────────────────────────────────────
        with trace_span("apply_changes") as span:
            updated = self._apply_changes(draft, payload, changed, schema, warnings)
            if span:
                span.annotate("updated", len(updated))

        # ── PERSIST ──────────────────────────────────────────
        with trace_span("persist"):
            outcome = self._store.persist(draft)

        if not outcome.ok:
            message = f"Failed to save draft: {outcome.first_error or 'validation failed'}"
            logger.warning("Draft for entry %s rejected: %s", record.id, outcome.errors)
            return ServiceResult(
                ok=False,
                op=OP,
                data=ImportResult.rejected(record.id, outcome.errors, message).to_wire(),
                warnings=warnings,
                error=ServiceError(
                    code=ErrorCode.VALIDATION_FAILED,
                    message=message,
                    detail={"errors": outcome.errors},
                ),
            )

        # ── RESPOND ──────────────────────────────────────────
        result = ImportResult.draft_created(
            record.id,
            draft.draft_id,
            updated,
            self._store.get_edit_url(draft),
        )
        logger.info("Created draft %s for entry %s (%s)", draft.draft_id, record.id, updated)
        self._dispatch_event(
            "post_import",
            {
                "record_id": record.id,
                "draft_id": draft.draft_id,
                "updated_fields": list(updated),
                "payload": dict(payload),
            },
            warnings,
        )
        return ServiceResult(ok=True, op=OP, data=result.to_wire(), warnings=warnings)

    # ------------------------------------------------------------------
    # Change detection
    # ------------------------------------------------------------------

    def _detect_changes(
        self,
        record: Record,
        payload: Mapping[str, Any],
        schema: Mapping[str, Field],
        warnings: list[str],
    ) -> list[str]:
        changed: list[str] = []
        native_values = self._native_values(record)

        new_title = payload.get("title")
        if new_title is not None and str(new_title) != (record.title or ""):
            changed.append("title")

        for handle, field in schema.items():
            if handle in RESERVED_HANDLES or handle not in payload:
                continue
            try:
                handler = self._registry.get_handler(field)
                baseline = self._exported_value(record, field, native_values)
                if baseline is OMIT:
                    baseline = None
                if handler.has_changed(field, baseline, payload[handle]):
                    changed.append(handle)
            except NoHandlerFoundError:
                raise
            except Exception as exc:
                logger.warning("Failed to compare field %s", handle, exc_info=True)
                warnings.append(f"Failed to compare field '{handle}': {exc}")

        logger.debug("Changed fields: %s", changed)
        return changed

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------

    def _apply_changes(
        self,
        draft: Record,
        payload: Mapping[str, Any],
        changed: list[str],
        schema: Mapping[str, Field],
        warnings: list[str],
    ) -> list[str]:
        updated: list[str] = []
        native: dict[str, Any] = {}
        custom: dict[str, Any] = {}

        for handle in changed:
            if handle in NATIVE_PROPERTIES:
                draft.title = str(payload[handle])
                updated.append(handle)
                continue
            field = schema[handle]
            try:
                handler = self._registry.get_handler(field)
                if handler.use_native_serialization():
                    native[handle] = payload[handle]
                else:
                    custom[handle] = handler.import_value(
                        field,
                        payload[handle],
                        ImportContext(draft=draft, field_handle=handle),
                    )
            except NoHandlerFoundError:
                raise
            except Exception as exc:
                logger.warning("Failed to transform field %s", handle, exc_info=True)
                warnings.append(f"Failed to import field '{handle}': {exc}")

        if native:
            updated.extend(self._set_native(draft, native, warnings))
        for handle, value in custom.items():
            if self._set_one(draft, handle, value, warnings):
                updated.append(handle)
        return updated

    def _set_native(self, draft: Record, values: dict[str, Any], warnings: list[str]) -> list[str]:
        """Bulk-set native fields, falling back to one call per field on failure."""
        try:
            self._store.set_field_values(draft, values)
        except Exception:
            logger.warning(
                "Bulk field update failed; retrying %d field(s) individually",
                len(values),
                exc_info=True,
            )
        else:
            return list(values)
        return [
            handle
            for handle, value in values.items()
            if self._set_one(draft, handle, value, warnings)
        ]

    def _set_one(self, draft: Record, handle: str, value: Any, warnings: list[str]) -> bool:
        try:
            self._store.set_field_value(draft, handle, value)
        except Exception as exc:
            logger.warning("Failed to set field %s", handle, exc_info=True)
            warnings.append(f"Failed to set field '{handle}': {exc}")
            return False
        return True
