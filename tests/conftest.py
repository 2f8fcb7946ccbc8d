"""Shared pytest fixtures for entryport tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from entryport.config.settings import EntryportSettings
from entryport.domain.fields import Field
from entryport.domain.values import Asset
from entryport.handlers import HandlerRegistry, build_registry
from entryport.infrastructure.memory import MemoryContentStore
from entryport.services.telemetry import disable_telemetry
from entryport.workspace import Workspace

PAGE_ID = 123

BLOCK_TYPES: list[dict[str, Any]] = [
    {"handle": "text", "name": "Text", "fields": [{"handle": "body", "type": "rich_text"}]},
    {
        "handle": "image",
        "name": "Image",
        "fields": [
            {"handle": "image", "type": "assets"},
            {"handle": "caption", "type": "plain_text"},
        ],
    },
    {
        "handle": "callout",
        "name": "Callout",
        "fields": [
            {"handle": "link", "type": "link"},
            {
                "handle": "style",
                "type": "dropdown",
                "options": [{"value": "info", "label": "Info"}, {"value": "warn", "label": "Warn"}],
            },
        ],
    },
    {
        "handle": "section",
        "name": "Section",
        "fields": [
            {
                "handle": "inner",
                "type": "matrix",
                "block_types": [
                    {"handle": "text", "fields": [{"handle": "body", "type": "rich_text"}]},
                ],
            },
        ],
    },
]

PAGE_SCHEMA: list[dict[str, Any]] = [
    {"handle": "body", "type": "rich_text", "name": "Body"},
    {"handle": "summary", "type": "plain_text", "name": "Summary", "required": True},
    {"handle": "price", "type": "number", "name": "Price"},
    {"handle": "published", "type": "date", "name": "Published"},
    {"handle": "featured", "type": "lightswitch", "name": "Featured"},
    {
        "handle": "category",
        "type": "dropdown",
        "name": "Category",
        "options": [{"value": "news", "label": "News"}, {"value": "events", "label": "Events"}],
    },
    {
        "handle": "tags",
        "type": "checkboxes",
        "name": "Tags",
        "options": [
            {"value": "a", "label": "A"},
            {"value": "b", "label": "B"},
            {"value": "c", "label": "C"},
        ],
    },
    {"handle": "related", "type": "entries", "name": "Related"},
    {"handle": "hero", "type": "assets", "name": "Hero"},
    {"handle": "cta", "type": "link", "name": "Call to action"},
    {"handle": "seo", "type": "seo_settings", "name": "SEO"},
    {"handle": "content", "type": "matrix", "name": "Content", "block_types": BLOCK_TYPES},
]

PAGE_VALUES: dict[str, Any] = {
    "body": "<p>Hello</p>",
    "summary": "Short",
    "price": 10,
    "published": "2024-01-15T09:30:00",
    "featured": True,
    "category": "news",
    "tags": ["a", "b"],
    "related": [5, 9],
    "hero": [30],
    "cta": {"type": "entry", "value": 5, "label": "Read more"},
    "seo": {"metaGlobalVars": {"seoTitle": "Hello SEO", "seoDescription": ""}},
    "content": [
        {"type": "text", "title": "Intro", "fields": {"body": "<p>Intro</p>"}},
        {"type": "image", "fields": {"image": [30], "caption": "Pic"}},
        {
            "type": "callout",
            "fields": {
                "link": {"type": "url", "value": "https://example.com", "label": "Go"},
                "style": "warn",
            },
        },
        {
            "type": "section",
            "title": "Nested",
            "fields": {"inner": [{"type": "text", "fields": {"body": "<p>Inside</p>"}}]},
        },
    ],
}


def page_schema() -> list[Field]:
    return [Field.model_validate(item) for item in PAGE_SCHEMA]


def seed_pages(store: MemoryContentStore) -> None:
    """Load the related entries, the assets, and the page under test."""
    store.add_asset(
        Asset(id=30, url="https://cdn.example.com/hero.jpg", title="Hero", alt="Hero image")
    )
    store.add_asset(Asset(id=31, url="https://cdn.example.com/alt.jpg", title="Alt"))
    for related_id, title in ((5, "Five"), (7, "Seven"), (9, "Nine")):
        store.add_record(related_id, title=title, slug=f"entry-{related_id}", uri=f"news/{related_id}")
    store.add_record(
        PAGE_ID,
        title="Page Title",
        slug="page-title",
        uri="pages/page-title",
        schema=page_schema(),
        values=PAGE_VALUES,
    )


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Iterator[None]:
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(params=[True, False], ids=["seo", "no-seo"])
def seo_enabled(request: pytest.FixtureRequest) -> bool:
    """Both SEO integration states; the integration is off by default."""
    return bool(request.param)


@pytest.fixture
def registry() -> HandlerRegistry:
    """Built-in handlers with the SEO integration enabled."""
    return build_registry(seo_enabled=True)


@pytest.fixture
def store() -> MemoryContentStore:
    """Memory store holding the page under test and its references."""
    s = MemoryContentStore()
    seed_pages(s)
    return s


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> EntryportSettings:
    monkeypatch.delenv("ENTRYPORT_CONFIG", raising=False)
    return EntryportSettings(project_root=tmp_path)


@pytest.fixture
def workspace(
    store: MemoryContentStore, registry: HandlerRegistry, settings: EntryportSettings
) -> Workspace:
    """Workspace over the seeded memory store, without plugins."""
    return Workspace(store=store, registry=registry, settings=settings)


@pytest.fixture
def exported(workspace: Workspace) -> Callable[..., dict[str, Any]]:
    """Export a record and return its document as it would arrive over the wire."""
    from entryport.services.export import ExportService

    def _export(record_id: int = PAGE_ID) -> dict[str, Any]:
        result = ExportService(workspace).export_by_id(record_id)
        assert result.ok, result.error
        return json.loads(json.dumps(result.data["document"][0]))

    return _export


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run CLI tests from an empty project directory with no config override."""
    monkeypatch.delenv("ENTRYPORT_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def fixture_file(tmp_path: Path) -> Path:
    """A seed document equivalent to :func:`seed_pages`."""
    document = {
        "assets": [
            {"id": 30, "url": "https://cdn.example.com/hero.jpg", "title": "Hero", "alt": "Hero image"},
            {"id": 31, "url": "https://cdn.example.com/alt.jpg", "title": "Alt"},
        ],
        "entries": [
            *(
                {"id": rid, "title": title, "slug": f"entry-{rid}", "uri": f"news/{rid}"}
                for rid, title in ((5, "Five"), (7, "Seven"), (9, "Nine"))
            ),
            {
                "id": PAGE_ID,
                "siteId": 1,
                "title": "Page Title",
                "slug": "page-title",
                "uri": "pages/page-title",
                "fields": PAGE_SCHEMA,
                "values": PAGE_VALUES,
            },
        ],
    }
    path = tmp_path / "fixture.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture
def seeded_project(
    _isolated_project: None, cli_runner: CliRunner, fixture_file: Path
) -> Path:
    """An isolated project whose database holds the seed document."""
    from entryport.cli import cli

    result = cli_runner.invoke(cli, ["seed", str(fixture_file)])
    assert result.exit_code == 0, result.output
    return fixture_file.parent
