"""Database engine and session helpers for the SQL document store."""
