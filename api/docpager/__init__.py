"""Offset and cursor pagination over JSON document collections."""
