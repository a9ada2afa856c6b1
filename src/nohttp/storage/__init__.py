"""Scan history and report cache (SQLite via aiosqlite)."""
