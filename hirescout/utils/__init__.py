"""Shared helpers for HTTP access and recency windows."""
