"""Coupon feed ingestion pipeline.

This module decompresses, parses, and merges gzip coupon feeds.
It hands confirmed codes to the store layer in bounded batches.
"""
