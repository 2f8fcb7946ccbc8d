"""SQLAlchemy Core table definitions for the entryport database.

Field schemas and values are stored as JSON text: the record layout is
owned by the host, so the database does not normalize it.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, Table, Text

metadata = MetaData()

records = Table(
    "records",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("site_id", Integer, primary_key=True, default=1),
    Column("title", Text, nullable=False, default=""),
    Column("slug", Text),
    Column("uri", Text),
    Column("field_schema", Text, nullable=False, default="[]"),  # JSON array of Field
    Column("field_values", Text, nullable=False, default="{}"),  # JSON object, native form
    Column("updated", Text, nullable=False),
)

assets = Table(
    "assets",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("url", Text),
    Column("title", Text),
    Column("alt", Text),
)

drafts = Table(
    "drafts",
    metadata,
    Column("draft_id", Integer, primary_key=True, autoincrement=True),
    Column("canonical_id", Integer, nullable=False),
    Column("site_id", Integer, nullable=False),
    Column("creator_id", Integer),
    Column("title", Text, nullable=False, default=""),
    Column("field_values", Text, nullable=False, default="{}"),
    Column("created", Text, nullable=False),
)