"""SQL-backed content store (SQLAlchemy Core on SQLite).

Records are stored with their field schema and their native-serialized
values as JSON; loading a record normalizes the values back into live
values. Saved drafts land in the ``drafts`` table.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, insert, or_, select
from sqlalchemy.engine import Engine, Row

from entryport.domain.fields import Field
from entryport.domain.records import Record
from entryport.domain.values import Asset, ElementRef
from entryport.infrastructure.codec import normalize_value, serialize_value
from entryport.infrastructure.database.schema import assets, drafts, records
from entryport.infrastructure.store import BaseContentStore


def _now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


class SqlContentStore(BaseContentStore):
    """Content store persisting records, assets, and drafts in SQLite."""

    def __init__(self, engine: Engine, *, base_url: str = "http://localhost") -> None:
        super().__init__(base_url=base_url)
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def close(self) -> None:
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def add_asset(self, asset: Asset) -> Asset:
        with self._engine.begin() as conn:
            conn.execute(delete(assets).where(assets.c.id == asset.id))
            conn.execute(
                insert(assets).values(id=asset.id, url=asset.url, title=asset.title, alt=asset.alt)
            )
        return asset

    def add_record(
        self,
        record_id: int,
        *,
        schema: Sequence[Field] = (),
        values: Mapping[str, Any] | None = None,
        title: str = "",
        site_id: int = 1,
        slug: str | None = None,
        uri: str | None = None,
    ) -> Record:
        """Insert or replace a record from storage-shaped *values*."""
        raw = values or {}
        record = Record(
            id=record_id,
            site_id=site_id,
            title=title,
            schema=tuple(schema),
            slug=slug,
            uri=uri,
        )
        record.values = {
            field.handle: normalize_value(field, raw.get(field.handle), self)
            for field in record.schema
        }
        with self._engine.begin() as conn:
            conn.execute(
                delete(records).where(records.c.id == record_id, records.c.site_id == site_id)
            )
            conn.execute(
                insert(records).values(
                    id=record_id,
                    site_id=site_id,
                    title=title,
                    slug=slug,
                    uri=uri,
                    field_schema=json.dumps([f.model_dump(mode="json") for f in record.schema]),
                    field_values=json.dumps(self.get_native_serialized_values(record)),
                    updated=_now_iso(),
                )
            )
        return record

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_record(self, record_id: int, site_id: int | None = None) -> Record | None:
        stmt = select(records).where(records.c.id == record_id)
        if site_id is not None:
            stmt = stmt.where(records.c.site_id == site_id)
        with self._engine.connect() as conn:
            row = conn.execute(stmt.order_by(records.c.site_id)).first()
        return self._hydrate(row) if row is not None else None

    def find_record_by_path(self, path_or_slug: str, site_id: int | None = None) -> Record | None:
        wanted = path_or_slug.strip("/")
        stmt = select(records).where(or_(records.c.slug == wanted, records.c.uri == wanted))
        if site_id is not None:
            stmt = stmt.where(records.c.site_id == site_id)
        with self._engine.connect() as conn:
            row = conn.execute(stmt.order_by(records.c.site_id, records.c.id)).first()
        return self._hydrate(row) if row is not None else None

    def resolve_elements(self, ids: Sequence[int]) -> list[ElementRef]:
        if not ids:
            return []
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(records.c.id, records.c.title)
                .where(records.c.id.in_(ids))
                .order_by(records.c.site_id)
            ).all()
        titles: dict[int, str] = {}
        for row in rows:
            titles.setdefault(row.id, row.title)
        return [ElementRef(id=element_id, title=titles.get(element_id)) for element_id in ids]

    def resolve_assets(self, ids: Sequence[int]) -> list[Asset]:
        if not ids:
            return []
        with self._engine.connect() as conn:
            rows = conn.execute(select(assets).where(assets.c.id.in_(ids))).all()
        by_id = {
            row.id: Asset(id=row.id, url=row.url, title=row.title, alt=row.alt) for row in rows
        }
        return [by_id.get(asset_id) or Asset(id=asset_id) for asset_id in ids]

    def resolve_element_url(self, link_type: str, element_id: int) -> str | None:
        if link_type == "asset":
            return super().resolve_element_url(link_type, element_id)
        # Read the uri column directly; hydrating would recurse through links.
        with self._engine.connect() as conn:
            uri = conn.execute(
                select(records.c.uri).where(records.c.id == element_id).order_by(records.c.site_id)
            ).scalar()
        return f"{self.base_url}/{uri.strip('/')}" if uri else None

    def list_drafts(self, canonical_id: int | None = None) -> list[dict[str, Any]]:
        stmt = select(drafts).order_by(drafts.c.draft_id)
        if canonical_id is not None:
            stmt = stmt.where(drafts.c.canonical_id == canonical_id)
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).all()
        return [
            {
                "draft_id": row.draft_id,
                "canonical_id": row.canonical_id,
                "site_id": row.site_id,
                "creator_id": row.creator_id,
                "title": row.title,
                "field_values": json.loads(row.field_values),
                "created": row.created,
            }
            for row in rows
        ]

    def _save_draft(self, draft: Record) -> int:
        with self._engine.begin() as conn:
            result = conn.execute(
                insert(drafts).values(
                    canonical_id=draft.canonical_id or draft.id,
                    site_id=draft.site_id,
                    creator_id=draft.creator_id,
                    title=draft.title,
                    field_values=json.dumps(
                        {
                            field.handle: serialize_value(field, draft.values.get(field.handle))
                            for field in draft.schema
                        },
                        default=str,
                    ),
                    created=_now_iso(),
                )
            )
            return int(result.inserted_primary_key[0])

    def _hydrate(self, row: Row[Any]) -> Record:
        schema = tuple(Field.model_validate(item) for item in json.loads(row.field_schema))
        stored: dict[str, Any] = json.loads(row.field_values)
        record = Record(
            id=row.id,
            site_id=row.site_id,
            title=row.title,
            schema=schema,
            slug=row.slug,
            uri=row.uri,
        )
        record.values = {
            field.handle: normalize_value(field, stored.get(field.handle), self) for field in schema
        }
        return record
