"""Logging, metrics, I/O and drawing helpers."""
