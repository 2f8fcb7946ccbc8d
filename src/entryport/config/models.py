"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``entryport.toml`` only holds
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    database: str = ".entryport/entryport.db"
    base_url: str = "http://localhost"


class ExportConfig(BaseModel):
    """[export] section."""

    model_config = {"frozen": True}

    native_serialization: bool = True
    indent: int = Field(default=2, ge=0)


class DraftsConfig(BaseModel):
    """[drafts] section."""

    model_config = {"frozen": True}

    default_site_id: int = Field(default=1, gt=0)
    acting_user_id: int | None = None


class IntegrationsConfig(BaseModel):
    """[integrations] section."""

    model_config = {"frozen": True}

    seo: bool = False


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    disabled: list[str] = Field(default_factory=list)
