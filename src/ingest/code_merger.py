"""Cross-file frequency merge with early confirmation.

This module folds per-file code sets into one occurrence counter and
confirms a code the moment its second distinct file reports it. The
merger is single-writer: only the consuming thread touches its state.
"""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from core.constants import CONFIRMATION_THRESHOLD

BatchSink = Callable[[Sequence[str]], None]


class CodeMerger:
    """Single-consumer merge stage feeding a bounded confirmed batch."""

    def __init__(self, flush: BatchSink, batch_size: int) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._flush = flush
        self._batch_size = batch_size
        self._counts: dict[str, int] = {}
        self._confirmed: set[str] = set()
        self._batch: list[str] = []
        self._flushed_batches = 0
        self._folded_files = 0

    @property
    def confirmed_codes(self) -> frozenset[str]:
        """Codes confirmed so far in this run."""
        return frozenset(self._confirmed)

    @property
    def flushed_batches(self) -> int:
        """Number of batches handed to the flush sink."""
        return self._flushed_batches

    @property
    def folded_files(self) -> int:
        """Number of per-file sets merged so far."""
        return self._folded_files

    @property
    def pending_count(self) -> int:
        """Codes seen in exactly one file and not yet confirmed."""
        return len(self._counts)

    def fold(self, codes: Iterable[str]) -> None:
        """Merge one file's unique codes and flush every full batch.

        Errors raised by the flush sink propagate and the batch is kept.

        Args:
            codes: Distinct valid codes from a single source file.
        """
        for code in codes:
            if code in self._confirmed:
                continue
            count = self._counts.get(code, 0) + 1
            if count >= CONFIRMATION_THRESHOLD:
                self._counts.pop(code, None)
                self._confirmed.add(code)
                self._batch.append(code)
            else:
                self._counts[code] = count
        self._folded_files += 1
        while len(self._batch) >= self._batch_size:
            self._emit_batch(self._batch_size)

    def finish(self) -> None:
        """Flush whatever remains in the confirmed batch."""
        if self._batch:
            self._emit_batch(len(self._batch))

    def _emit_batch(self, size: int) -> None:
        batch = tuple(self._batch[:size])
        self._flush(batch)
        del self._batch[:size]
        self._flushed_batches += 1
