"""Records, drafts, and persist outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from entryport.domain.fields import Field, ValidationScenario


@dataclass
class Record:
    """The entry being exported or imported.

    A draft is a ``Record`` whose ``canonical_id`` points at the record it
    was copied from. ``draft_id`` is assigned when the draft is persisted.
    """

    id: int
    site_id: int = 1
    title: str = ""
    schema: tuple[Field, ...] = ()
    values: dict[str, Any] = field(default_factory=dict)
    slug: str | None = None
    uri: str | None = None
    draft_id: int | None = None
    canonical_id: int | None = None
    creator_id: int | None = None
    scenario: ValidationScenario = ValidationScenario.DEFAULT

    @property
    def is_draft(self) -> bool:
        return self.canonical_id is not None

    def get_field(self, handle: str) -> Field | None:
        for f in self.schema:
            if f.handle == handle:
                return f
        return None


@dataclass(frozen=True)
class PersistOutcome:
    """Result of persisting a draft: success, or per-path validation errors."""

    ok: bool
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def first_error(self) -> str | None:
        for messages in self.errors.values():
            if messages:
                return messages[0]
        return None
