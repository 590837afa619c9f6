"""Coupon ingest orchestration.

This module wires decompression, per-file parsing, the single-consumer
merge, and batched store writes, and applies the configured error
tolerance policy to each stage.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Sequence

from core.config import CouponSettings
from core.errors import PromoDecompressionError, PromoParseError
from core.logging_config import get_logger
from core.types import CouponRunSummary, SourceFile
from ingest.batch_flusher import BatchFlusher
from ingest.code_merger import CodeMerger
from ingest.decompression import decompress_sources
from ingest.digest_cache import CouponDigestCache, compute_sources_digest
from ingest.file_parser import parse_code_file
from store.membership_store import MembershipStore

_LOGGER = get_logger(__name__)


class CouponPipelineRunner:
    """Runner for one coupon ingestion pass over configured sources."""

    def __init__(
        self,
        settings: CouponSettings,
        store: MembershipStore,
        cache: CouponDigestCache | None = None,
        max_decompress_workers: int | None = None,
    ) -> None:
        self._settings = settings
        self._flusher = BatchFlusher(store, settings.store_keys)
        self._cache = cache
        self._max_decompress_workers = max_decompress_workers

    def run(self, sources: Sequence[SourceFile]) -> CouponRunSummary:
        """Execute every stage and return the run summary."""
        digest = self._compute_digest(sources)
        if digest is not None and self._cache is not None:
            cached_codes = self._cache.load(digest)
            if cached_codes is not None:
                return self._replay_cached_codes(sources, cached_codes)
        ready_sources, skipped = self._decompress(sources)
        merger = CodeMerger(self._flusher.flush, self._settings.batch_size)
        processed = self._merge_parsed_sources(ready_sources, merger, skipped)
        merger.finish()
        if digest is not None and self._cache is not None and not skipped:
            self._cache.save(digest, merger.confirmed_codes)
        summary = CouponRunSummary(
            confirmed_count=len(merger.confirmed_codes),
            processed_files=tuple(processed),
            skipped_files=tuple(skipped),
            flushed_batches=merger.flushed_batches,
        )
        _log_run_completion(summary, merger.pending_count)
        return summary

    def _compute_digest(self, sources: Sequence[SourceFile]) -> str | None:
        if self._cache is None:
            return None
        source_paths = [source.source_path for source in sources]
        try:
            return compute_sources_digest(source_paths, self._settings.rules)
        except PromoParseError as error:
            _LOGGER.warning("digest_cache_bypassed", error=str(error))
            return None

    def _replay_cached_codes(
        self,
        sources: Sequence[SourceFile],
        cached_codes: frozenset[str],
    ) -> CouponRunSummary:
        ordered_codes = sorted(cached_codes)
        batch_size = self._settings.batch_size
        flushed_batches = 0
        for start in range(0, len(ordered_codes), batch_size):
            self._flusher.flush(ordered_codes[start : start + batch_size])
            flushed_batches += 1
        summary = CouponRunSummary(
            confirmed_count=len(ordered_codes),
            processed_files=tuple(str(source.source_path) for source in sources),
            skipped_files=(),
            flushed_batches=flushed_batches,
            cache_hit=True,
        )
        _log_run_completion(summary, 0)
        return summary

    def _decompress(self, sources: Sequence[SourceFile]) -> tuple[list[SourceFile], list[str]]:
        report = decompress_sources(sources, max_workers=self._max_decompress_workers)
        if report.failed and not self._settings.ignore_errors:
            reasons = "; ".join(failure.reason for failure in report.failed)
            raise PromoDecompressionError(
                f"{len(report.failed)} of {len(sources)} sources failed to decompress: {reasons}",
                source_path=str(report.failed[0].source.source_path),
            )
        skipped: list[str] = []
        for failure in report.failed:
            _LOGGER.warning(
                "source_skipped",
                stage="decompress",
                source_path=str(failure.source.source_path),
                reason=failure.reason,
            )
            skipped.append(str(failure.source.source_path))
        return list(report.succeeded), skipped

    def _merge_parsed_sources(
        self,
        sources: Sequence[SourceFile],
        merger: CodeMerger,
        skipped: list[str],
    ) -> list[str]:
        """Parse every source in parallel and fold results as they finish."""
        if not sources:
            _LOGGER.warning("no_sources_to_parse", skipped_count=len(skipped))
            return []
        processed: list[str] = []
        with ThreadPoolExecutor(max_workers=len(sources), thread_name_prefix="parse") as executor:
            futures = {
                executor.submit(
                    parse_code_file,
                    source.decompressed_path,
                    self._settings.rules,
                    self._settings.max_line_bytes,
                ): source
                for source in sources
            }
            for future in as_completed(futures):
                source = futures[future]
                try:
                    codes = future.result()
                except PromoParseError as error:
                    if not self._settings.ignore_errors:
                        raise
                    _LOGGER.warning(
                        "source_skipped",
                        stage="parse",
                        source_path=str(source.source_path),
                        reason=str(error),
                    )
                    skipped.append(str(source.source_path))
                    continue
                merger.fold(codes)
                processed.append(str(source.source_path))
        return processed


def process_coupons(
    sources: Sequence[SourceFile],
    settings: CouponSettings,
    store: MembershipStore,
    cache: CouponDigestCache | None = None,
) -> CouponRunSummary:
    """Populate the membership store with codes seen in two or more feeds.

    Args:
        sources: Gzip feed files to ingest.
        settings: Batching, validation, and tolerance settings.
        store: Membership store receiving confirmed codes.
        cache: Optional digest cache to skip unchanged inputs.

    Returns:
        Summary of confirmed codes and per-file outcomes.

    Raises:
        PromoDecompressionError: If a source fails to inflate in strict mode.
        PromoParseError: If a feed fails to parse in strict mode.
        PromoFlushError: If any store write fails, regardless of mode.
    """
    runner = CouponPipelineRunner(settings, store, cache)
    return runner.run(sources)


def _log_run_completion(summary: CouponRunSummary, pending_count: int) -> None:
    """Log pipeline completion with contextual metadata."""
    _LOGGER.info(
        "coupon_run_completed",
        confirmed_count=summary.confirmed_count,
        processed_files=list(summary.processed_files),
        skipped_files=list(summary.skipped_files),
        flushed_batches=summary.flushed_batches,
        unconfirmed_count=pending_count,
        cache_hit=summary.cache_hit,
    )
