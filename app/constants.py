"""Shared constants for identifier validation routes."""

API_TITLE = "Identifier Validation API"
API_VERSION = "1.0.0"
MAX_BATCH_SIZE = 100
