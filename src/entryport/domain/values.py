"""Live field values as the host hands them to handlers.

Each family has an explicit value type. Handlers dispatch on these types
with ``isinstance`` instead of probing for methods at call time.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from entryport.domain.fields import Field


@dataclass(frozen=True)
class OptionValue:
    """The selected choice of a single-option field."""

    value: str | None
    label: str | None = None


@dataclass(frozen=True)
class MultiOptionValue:
    """The selected choices of a multi-option field, in selection order."""

    options: tuple[OptionValue, ...] = ()

    def __iter__(self) -> Iterator[OptionValue]:
        return iter(self.options)

    def __len__(self) -> int:
        return len(self.options)

    @property
    def values(self) -> list[str | None]:
        return [opt.value for opt in self.options]


@dataclass(frozen=True)
class ElementRef:
    """A reference to another element (entry, category, tag, user)."""

    id: int
    title: str | None = None


@dataclass(frozen=True)
class Asset(ElementRef):
    """A file or media element."""

    url: str | None = None
    alt: str | None = None


@runtime_checkable
class LinkLike(Protocol):
    """Capability exposed by every link value, built-in or third-party."""

    @property
    def type(self) -> str: ...

    @property
    def url(self) -> str | None: ...

    @property
    def label(self) -> str | None: ...

    @property
    def target(self) -> str | None: ...

    @property
    def aria_label(self) -> str | None: ...

    @property
    def element_id(self) -> int | None: ...


@dataclass(frozen=True)
class LinkValue:
    """A single link of a link field."""

    type: str = "url"
    url: str | None = None
    label: str | None = None
    target: str | None = None
    aria_label: str | None = None
    element_id: int | None = None


@dataclass
class SeoBundle:
    """Metadata container of the SEO integration.

    ``meta_site_vars`` override ``meta_global_vars`` key by key.
    """

    meta_global_vars: dict[str, Any] = field(default_factory=dict)
    meta_site_vars: dict[str, Any] = field(default_factory=dict)


@dataclass
class Block:
    """One repeatable unit inside a block-group field."""

    type: str
    fields: tuple[Field, ...] = ()
    values: dict[str, Any] = field(default_factory=dict)
    title: str | None = None
    enabled: bool = True
    collapsed: bool = False

    def get_field_value(self, handle: str) -> Any:
        return self.values.get(handle)
