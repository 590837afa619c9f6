"""Core constants used across Promoload modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".promoload")
DIGEST_CACHE_DIR_NAME = "digest_cache"
DIGEST_FILE_NAME = "digest.txt"
CACHED_CODES_FILE_NAME = "codes.json"
HASH_ALGORITHM = "sha256"
GZIP_SUFFIX = ".gz"
TEMP_FILE_SUFFIX = ".tmp"
CONFIRMATION_THRESHOLD = 2
DEFAULT_MAX_LINE_BYTES = 4 * 1024 * 1024
DECOMPRESSION_BUFFER_BYTES = 1024 * 1024
HASH_READ_CHUNK_BYTES = 1024 * 1024
MIN_SOURCE_FILES = 1
MAX_SOURCE_FILES = 3
MIN_BATCH_SIZE = 100
MAX_BATCH_SIZE = 10000
DEFAULT_BATCH_SIZE = 1000
DEFAULT_MIN_CODE_LENGTH = 8
DEFAULT_MAX_CODE_LENGTH = 10
DEFAULT_ALLOWED_CHARACTERS = "alphanumeric"
SUPPORTED_CHARACTER_CLASSES = ("alphanumeric", "digits", "letters", "uppercase", "lowercase")
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_CONNECT_TIMEOUT_SECONDS = 5.0
DEFAULT_SOCKET_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_CONNECTIONS = 20
DEFAULT_CONNECT_RETRIES = 3
DEFAULT_RETRY_INTERVAL_SECONDS = 0.5
MAX_RETRY_BACKOFF_SECONDS = 30.0
ITEM_EXISTS_MARKER = "item exists"
