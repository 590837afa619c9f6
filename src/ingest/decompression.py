"""Idempotent gzip decompression for coupon feeds.

This module writes each feed's decompressed sibling through a temp file
and an atomic rename, so a crashed run never leaves a partial file that
a retry would mistake for a complete one.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
import gzip
import os
from pathlib import Path
import queue
import tempfile
from typing import IO, Iterator, Sequence
import zlib

from core.constants import DECOMPRESSION_BUFFER_BYTES, TEMP_FILE_SUFFIX
from core.errors import PromoDecompressionError
from core.logging_config import get_logger
from core.types import DecompressionFailure, DecompressionReport, SourceFile

_LOGGER = get_logger(__name__)


class CopyBufferPool:
    """Reusable copy buffers shared across decompression workers."""

    def __init__(self, buffer_bytes: int = DECOMPRESSION_BUFFER_BYTES) -> None:
        self._buffer_bytes = buffer_bytes
        self._buffers: queue.SimpleQueue[bytearray] = queue.SimpleQueue()

    @contextmanager
    def borrow(self) -> Iterator[bytearray]:
        """Lend a buffer for the duration of one copy."""
        try:
            buffer = self._buffers.get_nowait()
        except queue.Empty:
            buffer = bytearray(self._buffer_bytes)
        try:
            yield buffer
        finally:
            self._buffers.put(buffer)

    def idle_count(self) -> int:
        """Return how many buffers are currently waiting for reuse."""
        return self._buffers.qsize()


_DEFAULT_BUFFER_POOL = CopyBufferPool()


def default_worker_limit() -> int:
    """Return the decompression concurrency cap, half the visible CPUs."""
    return max(1, (os.cpu_count() or 1) // 2)


def decompress_source(source: SourceFile, buffer_pool: CopyBufferPool | None = None) -> Path:
    """Decompress one gzip feed next to its source.

    Args:
        source: Feed file with its target sibling path.
        buffer_pool: Optional pool of copy buffers to reuse.

    Returns:
        Path to the decompressed file.

    Raises:
        PromoDecompressionError: If the source cannot be read or inflated.
    """
    destination = source.decompressed_path
    if destination.exists():
        _LOGGER.debug("decompression_skipped", source_path=str(source.source_path))
        return destination
    pool = buffer_pool or _DEFAULT_BUFFER_POOL
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=destination.parent,
            prefix=f".{destination.name}.",
            suffix=TEMP_FILE_SUFFIX,
            delete=False,
        ) as temp_file:
            temp_path = Path(temp_file.name)
            with gzip.open(source.source_path, "rb") as reader, pool.borrow() as buffer:
                _copy_stream(reader, temp_file, buffer)
        os.replace(temp_path, destination)
    except (OSError, EOFError, zlib.error) as error:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise PromoDecompressionError(
            f"Failed to decompress {source.source_path}: {error}. "
            "Check that the file exists and is a valid gzip archive.",
            source_path=str(source.source_path),
        ) from error
    _LOGGER.info(
        "decompression_completed",
        source_path=str(source.source_path),
        decompressed_path=str(destination),
    )
    return destination


def decompress_sources(
    sources: Sequence[SourceFile],
    max_workers: int | None = None,
    buffer_pool: CopyBufferPool | None = None,
) -> DecompressionReport:
    """Decompress every source under a bounded worker pool.

    A failing source never cancels the others; all outcomes are
    collected before this returns.

    Args:
        sources: Feed files to decompress.
        max_workers: Concurrency cap, defaults to half the CPUs.
        buffer_pool: Optional shared copy-buffer pool.

    Returns:
        Report of succeeded sources, in input order, and failures.
    """
    worker_limit = max_workers or default_worker_limit()
    failures: dict[SourceFile, DecompressionFailure] = {}
    with ThreadPoolExecutor(max_workers=worker_limit, thread_name_prefix="decompress") as executor:
        futures = {
            executor.submit(decompress_source, source, buffer_pool): source for source in sources
        }
        for future in as_completed(futures):
            source = futures[future]
            try:
                future.result()
            except PromoDecompressionError as error:
                failures[source] = DecompressionFailure(source=source, reason=str(error))
    succeeded = tuple(source for source in sources if source not in failures)
    ordered_failures = tuple(failures[source] for source in sources if source in failures)
    return DecompressionReport(succeeded=succeeded, failed=ordered_failures)


def _copy_stream(reader: gzip.GzipFile, writer: IO[bytes], buffer: bytearray) -> None:
    """Copy an inflated stream into the writer through a reused buffer."""
    with memoryview(buffer) as view:
        while True:
            read_count = reader.readinto(view)
            if not read_count:
                break
            writer.write(view[:read_count])
