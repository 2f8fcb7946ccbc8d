"""SQLite persistence for the SQL-backed content store."""
