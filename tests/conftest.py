"""Pytest configuration for repository test runs."""

from __future__ import annotations

from dataclasses import dataclass, field
import gzip
from pathlib import Path
import sys
from typing import Callable, Sequence

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@dataclass
class FakeMembershipStore:
    """In-memory store recording every bulk write in call order."""

    filters: dict[str, set[str]] = field(default_factory=dict)
    sets: dict[str, set[str]] = field(default_factory=dict)
    calls: list[tuple[str, str, tuple[str, ...]]] = field(default_factory=list)
    filter_error: Exception | None = None
    set_error: Exception | None = None

    def add_to_filter(self, filter_name: str, codes: Sequence[str]) -> None:
        self.calls.append(("filter", filter_name, tuple(codes)))
        self.filters.setdefault(filter_name, set()).update(codes)
        if self.filter_error is not None:
            raise self.filter_error

    def add_to_set(self, set_name: str, codes: Sequence[str]) -> None:
        self.calls.append(("set", set_name, tuple(codes)))
        if self.set_error is not None:
            raise self.set_error
        self.sets.setdefault(set_name, set()).update(codes)

    def filter_contains(self, filter_name: str, code: str) -> bool:
        return code in self.filters.get(filter_name, set())

    def set_contains(self, set_name: str, code: str) -> bool:
        return code in self.sets.get(set_name, set())

    def set_batches(self) -> list[tuple[str, ...]]:
        return [codes for kind, _, codes in self.calls if kind == "set"]


@pytest.fixture
def fake_store() -> FakeMembershipStore:
    """Fresh in-memory membership store."""
    return FakeMembershipStore()


@pytest.fixture
def write_gzip_feed(tmp_path: Path) -> Callable[[str, Sequence[str]], Path]:
    """Factory writing newline-delimited lines into a gzip feed."""

    def _write(name: str, lines: Sequence[str]) -> Path:
        feed_path = tmp_path / name
        with gzip.open(feed_path, "wt", encoding="utf-8") as feed:
            feed.write("\n".join(lines) + "\n")
        return feed_path

    return _write
