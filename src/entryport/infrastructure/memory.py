"""In-process content store, used by tests and embedding applications."""

from __future__ import annotations

import copy
import itertools
from collections.abc import Mapping, Sequence
from typing import Any

from entryport.domain.fields import Field
from entryport.domain.records import Record
from entryport.domain.values import Asset, ElementRef
from entryport.infrastructure.codec import normalize_value
from entryport.infrastructure.store import BaseContentStore


class MemoryContentStore(BaseContentStore):
    """Keeps records, assets, and saved drafts in dictionaries."""

    def __init__(self, *, base_url: str = "http://localhost") -> None:
        super().__init__(base_url=base_url)
        self._records: dict[tuple[int, int], Record] = {}
        self._assets: dict[int, Asset] = {}
        self.drafts: dict[int, Record] = {}
        self._draft_ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def add_asset(self, asset: Asset) -> Asset:
        self._assets[asset.id] = asset
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
        """Create a record from storage-shaped *values*.

        Relations resolve against records and assets added earlier.
        """
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
        self._records[(record_id, site_id)] = record
        return record

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_record(self, record_id: int, site_id: int | None = None) -> Record | None:
        if site_id is not None:
            return self._records.get((record_id, site_id))
        matches = sorted(
            (key for key in self._records if key[0] == record_id), key=lambda key: key[1]
        )
        return self._records[matches[0]] if matches else None

    def find_record_by_path(self, path_or_slug: str, site_id: int | None = None) -> Record | None:
        wanted = path_or_slug.strip("/")
        for (_, record_site), record in sorted(self._records.items()):
            if site_id is not None and record_site != site_id:
                continue
            if record.slug == wanted or (record.uri or "").strip("/") == wanted:
                return record
        return None

    def resolve_elements(self, ids: Sequence[int]) -> list[ElementRef]:
        refs: list[ElementRef] = []
        for element_id in ids:
            record = self.find_record(element_id)
            refs.append(ElementRef(id=element_id, title=record.title if record else None))
        return refs

    def resolve_assets(self, ids: Sequence[int]) -> list[Asset]:
        return [self._assets.get(asset_id) or Asset(id=asset_id) for asset_id in ids]

    def _save_draft(self, draft: Record) -> int:
        draft_id = next(self._draft_ids)
        saved = copy.deepcopy(draft)
        saved.draft_id = draft_id
        self.drafts[draft_id] = saved
        return draft_id
