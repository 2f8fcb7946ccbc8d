"""Seed documents: load records and assets into a content store.

Document shape::

    {
      "assets": [{"id": 7, "url": "https://cdn/x.jpg", "title": "X", "alt": "..."}],
      "entries": [
        {"id": 123, "siteId": 1, "title": "Page Title", "slug": "page",
         "uri": "pages/page", "fields": [{"handle": "body", "type": "rich_text"}],
         "values": {"body": "<p>Hello</p>"}}
      ]
    }

``values`` use the host's native storage shape (see ``codec.serialize_value``).
Assets load first so asset fields resolve; entries load in document order,
so entries referenced for link URLs should come first.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field as PydanticField

from entryport.domain.fields import Field
from entryport.domain.values import Asset

if TYPE_CHECKING:
    from entryport.infrastructure.store import BaseContentStore

logger = logging.getLogger(__name__)


class SeedAsset(BaseModel):
    model_config = {"frozen": True}

    id: int
    url: str | None = None
    title: str | None = None
    alt: str | None = None


class SeedEntry(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True}

    id: int
    site_id: int = PydanticField(default=1, alias="siteId")
    title: str = ""
    slug: str | None = None
    uri: str | None = None
    fields: list[Field] = PydanticField(default_factory=list)
    values: dict[str, Any] = PydanticField(default_factory=dict)


class SeedDocument(BaseModel):
    model_config = {"frozen": True}

    assets: list[SeedAsset] = PydanticField(default_factory=list)
    entries: list[SeedEntry] = PydanticField(default_factory=list)


def load_fixture(store: BaseContentStore, data: dict[str, Any]) -> dict[str, int]:
    """Validate *data* as a :class:`SeedDocument` and load it into *store*.

    Returns counts of loaded items.

    Raises:
        pydantic.ValidationError: The document is malformed.
    """
    document = SeedDocument.model_validate(data)
    for seed_asset in document.assets:
        store.add_asset(Asset(**seed_asset.model_dump()))
    for entry in document.entries:
        store.add_record(
            entry.id,
            schema=entry.fields,
            values=entry.values,
            title=entry.title,
            site_id=entry.site_id,
            slug=entry.slug,
            uri=entry.uri,
        )
        logger.debug("Seeded record %s (site %s)", entry.id, entry.site_id)
    return {"assets": len(document.assets), "entries": len(document.entries)}
