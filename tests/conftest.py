"""Pytest configuration: in-memory store and a controllable clock for scheduler tests."""

from __future__ import annotations

import json
import os
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

_SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(_SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(_SRC_ROOT))

# テスト中に .data/ 配下へ SQLite を作らないよう、既定はメモリストアにする。
os.environ.setdefault("SRS_STORE_BACKEND", "memory")

from sawasdee.catalog import VocabularyCatalog  # noqa: E402
from sawasdee.logging import configure_logging  # noqa: E402
from sawasdee.models.vocabulary import Difficulty, VocabularyItem  # noqa: E402
from sawasdee.srs import ReviewScheduler  # noqa: E402
from sawasdee.store import InMemoryKeyValueStore  # noqa: E402


class FrozenClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


@pytest.fixture(autouse=True)
def _configure_structlog() -> None:
    """Structlog を JSON 出力に統一し、caplog で検証しやすくする。

    basicConfig(force=True) は root のハンドラを置き換えるため、caplog の
    ハンドラが付く call フェーズより前（fixture 内）で呼んでおく。
    """

    configure_logging()


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 2, 9, 0, tzinfo=UTC))


@pytest.fixture()
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def scheduler(memory_store: InMemoryKeyValueStore, clock: FrozenClock) -> ReviewScheduler:
    """Scheduler over the bundled Thai catalog."""
    return ReviewScheduler(memory_store, clock=clock)


@pytest.fixture()
def small_catalog() -> VocabularyCatalog:
    return VocabularyCatalog(
        [
            VocabularyItem(id="a", text="ยาก", translation="Difficult", difficulty=Difficulty.advanced),
            VocabularyItem(id="b", text="สวัสดี", translation="Hello", difficulty=Difficulty.beginner),
            VocabularyItem(id="c", text="รัก", translation="Love", difficulty=Difficulty.intermediate),
            VocabularyItem(id="d", text="น้ำ", translation="Water", difficulty=Difficulty.beginner),
        ]
    )


@pytest.fixture()
def small_scheduler(
    memory_store: InMemoryKeyValueStore, small_catalog: VocabularyCatalog, clock: FrozenClock
) -> ReviewScheduler:
    return ReviewScheduler(memory_store, small_catalog, clock=clock)


def structlog_events(caplog: pytest.LogCaptureFixture, event: str) -> list[dict[str, object]]:
    """指定イベント名の structlog ペイロードを抽出する。"""

    matches: list[dict[str, object]] = []
    for record in caplog.records:
        try:
            payload = json.loads(record.getMessage())
        except (json.JSONDecodeError, TypeError):
            continue
        if isinstance(payload, dict) and payload.get("event") == event:
            matches.append(payload)
    return matches


@pytest.fixture()
def events(caplog: pytest.LogCaptureFixture):
    """Return a lookup ``events("srs_state_load_failed") -> [payload, ...]``."""

    def _lookup(event: str) -> list[dict[str, object]]:
        return structlog_events(caplog, event)

    return _lookup
