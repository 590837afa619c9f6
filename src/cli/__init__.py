"""Command-line interface for coupon ingestion and lookups."""
