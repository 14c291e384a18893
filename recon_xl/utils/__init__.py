"""Small helpers for parsing cell values."""
