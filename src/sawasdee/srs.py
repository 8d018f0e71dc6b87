from __future__ import annotations

import math
import threading
from datetime import UTC, datetime, timedelta, tzinfo
from typing import Callable, List, Mapping, Optional

from .catalog import VocabularyCatalog, default_catalog
from .config import DEFAULT_STORAGE_KEY, Settings
from .logging import logger
from .models.review import MAX_INTERVAL_DAYS, MIN_EASE_FACTOR, ReviewQuality, ReviewState, ReviewStats, SchedulerState
from .models.vocabulary import VocabularyItem
from .store import PersistentStore, StoreError, build_store

Clock = Callable[[], datetime]


class UnknownItemError(KeyError):
    """Raised in strict mode when an item id is not part of the catalog."""


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _round_half_up(value: float) -> int:
    # 組み込み round() は偶数丸めのため使わない（2.5 -> 3）
    return int(math.floor(value + 0.5))


def _coerce_quality(quality: int) -> ReviewQuality:
    # 3.9 -> 3 のような切り捨てや True -> 1 を通さない
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise ValueError(f"quality must be an integer 0-5, got {quality!r}")
    return ReviewQuality(quality)


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """Standard SM-2 ease adjustment, floored at 1.3."""
    miss = 5 - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def apply_review(state: ReviewState, quality: ReviewQuality, now: datetime) -> ReviewState:
    """Return a copy of ``state`` after one review graded ``quality``.

    - quality < 3: repetitions を 0 に戻し、間隔は 1 日から再開
    - quality >= 3: 間隔 1 -> 6 -> round(interval * ease) と伸ばす
    - ease は合否にかかわらず更新（間隔計算には更新前の値を使う）
    """
    repetitions = state.repetitions
    if not quality.passed:
        repetitions = 0
        interval = 1
    else:
        if repetitions == 0:
            interval = 1
        elif repetitions == 1:
            interval = 6
        else:
            interval = _round_half_up(state.interval * state.ease_factor)
        # 100 年で頭打ち（datetime の上限超えを防ぐ）
        interval = min(interval, MAX_INTERVAL_DAYS)
        repetitions += 1

    return state.model_copy(
        update={
            "interval": interval,
            "repetitions": repetitions,
            "ease_factor": next_ease_factor(state.ease_factor, int(quality)),
            "total_reviews": state.total_reviews + 1,
            "correct_reviews": state.correct_reviews + (1 if quality.passed else 0),
            "last_review_date": now,
            "next_review_date": now + timedelta(days=interval),
        }
    )


def update_streak(current_streak: int, last_session: Optional[datetime], now: datetime, tz: tzinfo) -> int:
    """Consecutive calendar-day streak after a review at ``now``.

    暦日は ``tz`` で判定する。同日の2回目以降は据え置き、前日なら +1、
    それ以外（初回・1日以上空いた）は 1 に戻す。
    """
    today = now.astimezone(tz).date()
    if last_session is not None:
        last_day = last_session.astimezone(tz).date()
        if last_day == today:
            return current_streak
        if last_day == today - timedelta(days=1):
            return current_streak + 1
    return 1


class ReviewScheduler:
    """SM-2 review scheduler over a single persisted blob.

    Every operation loads the whole ``SchedulerState`` from the store and every
    mutating operation writes it back in full. Calls are serialized through an
    instance lock; the store itself has no compare-and-swap, so only one
    scheduler instance should write a given key.

    Notes:
    - 読み込み失敗（ストア障害・破損 JSON）は既定の空状態にフォールバックする
    - 書き込み失敗はログに残し、raise_on_write_error=True の場合のみ送出する
    - strict_item_ids=False（既定）ではカタログに無い ID でも状態を作成する
    """

    def __init__(
        self,
        store: PersistentStore,
        catalog: Optional[VocabularyCatalog] = None,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        tz: tzinfo = UTC,
        clock: Optional[Clock] = None,
        strict_item_ids: bool = False,
        raise_on_write_error: bool = False,
        new_items_default: int = 5,
    ) -> None:
        self.store = store
        self.catalog = catalog if catalog is not None else default_catalog()
        self.storage_key = storage_key
        self.tz = tz
        self.clock: Clock = clock or _utc_now
        self.strict_item_ids = strict_item_ids
        self.raise_on_write_error = raise_on_write_error
        self.new_items_default = new_items_default
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        cfg: Settings,
        *,
        store: Optional[PersistentStore] = None,
        catalog: Optional[VocabularyCatalog] = None,
        clock: Optional[Clock] = None,
    ) -> "ReviewScheduler":
        return cls(
            store if store is not None else build_store(cfg),
            catalog,
            storage_key=cfg.srs_storage_key,
            tz=cfg.tzinfo,
            clock=clock,
            strict_item_ids=cfg.srs_strict_item_ids,
            raise_on_write_error=cfg.srs_raise_on_write_error,
            new_items_default=cfg.srs_new_items_default,
        )

    # --- low-level helpers ---
    def _now(self) -> datetime:
        now = self.clock()
        return now.replace(tzinfo=UTC) if now.tzinfo is None else now.astimezone(UTC)

    def _load(self) -> SchedulerState:
        try:
            raw = self.store.get(self.storage_key)
            if not raw:
                return SchedulerState()
            return SchedulerState.model_validate_json(raw)
        except (StoreError, ValueError) as exc:
            # pydantic.ValidationError は ValueError のサブクラス
            logger.warning("srs_state_load_failed", key=self.storage_key, error=repr(exc))
            return SchedulerState()

    def _save(self, state: SchedulerState) -> None:
        try:
            self.store.set(self.storage_key, state.to_json())
        except StoreError as exc:
            logger.error("srs_state_save_failed", key=self.storage_key, error=repr(exc))
            if self.raise_on_write_error:
                raise

    def _check_item(self, item_id: str) -> None:
        if self.strict_item_ids and not self.catalog.is_known_item(item_id):
            raise UnknownItemError(item_id)

    def _due_items(self, state: SchedulerState, now: datetime) -> List[VocabularyItem]:
        due: list[tuple[tuple[int, datetime], VocabularyItem]] = []
        for item in self.catalog:
            progress = state.items.get(item.id)
            if progress is None:
                # 未学習は最優先（最も期限超過扱い）
                due.append(((0, now), item))
            elif progress.is_due(now):
                due.append(((1, progress.next_review_date), item))
        due.sort(key=lambda pair: pair[0])
        return [item for _, item in due]

    # --- public API ---
    def get_due_items(self, limit: Optional[int] = None) -> List[VocabularyItem]:
        """Catalog items that are due now, most overdue first.

        Never-reviewed items come first in catalog order, then reviewed items by
        ascending ``next_review_date``.
        """
        with self._lock:
            items = self._due_items(self._load(), self._now())
        if limit is not None:
            items = items[: max(0, limit)]
        return items

    def get_new_items(self, count: Optional[int] = None) -> List[VocabularyItem]:
        """Up to ``count`` never-tracked items, easiest difficulty first."""
        if count is None:
            count = self.new_items_default
        with self._lock:
            state = self._load()
        fresh = [item for item in self.catalog if item.id not in state.items]
        fresh.sort(key=lambda item: item.difficulty.rank)
        return fresh[: max(0, count)]

    def record_review(self, item_id: str, quality: int) -> ReviewState:
        """Grade one recall of ``item_id`` and persist the updated state.

        Raises ``ValueError`` when ``quality`` is not an integer in 0-5 and, in strict
        mode, ``UnknownItemError`` for ids missing from the catalog.
        """
        grade = _coerce_quality(quality)
        self._check_item(item_id)
        with self._lock:
            state = self._load()
            now = self._now()
            current = state.items.get(item_id) or ReviewState.new(item_id, now)
            updated = apply_review(current, grade, now)
            state.items[item_id] = updated

            if updated.total_reviews == 1:
                state.total_words_learned += 1

            state.current_streak = update_streak(state.current_streak, state.last_session_date, now, self.tz)
            state.last_session_date = now

            self._save(state)

        logger.info(
            "srs_review_recorded",
            item_id=item_id,
            quality=int(grade),
            interval=updated.interval,
            ease_factor=round(updated.ease_factor, 4),
            repetitions=updated.repetitions,
            streak=state.current_streak,
        )
        return updated

    def get_stats(self) -> ReviewStats:
        with self._lock:
            state = self._load()
            now = self._now()
        return ReviewStats(
            total_words_learned=state.total_words_learned,
            words_for_review=len(self._due_items(state, now)),
            mastered_words=sum(1 for progress in state.items.values() if progress.is_mastered),
            review_streak=state.current_streak,
        )

    def add_item_to_review(self, item_id: str, metadata: Optional[Mapping[str, str]] = None) -> bool:
        """Start tracking ``item_id`` with a default, immediately-due state.

        Idempotent: returns ``False`` and writes nothing if the item already has
        state. ``metadata`` (text/romanization/translation) is only logged.
        """
        self._check_item(item_id)
        with self._lock:
            state = self._load()
            if item_id in state.items:
                return False
            state.items[item_id] = ReviewState.new(item_id, self._now())
            self._save(state)
        logger.info("srs_item_saved", item_id=item_id, created=True, metadata=dict(metadata or {}))
        return True

    def is_item_saved(self, item_id: str) -> bool:
        with self._lock:
            return item_id in self._load().items

    def get_item_state(self, item_id: str) -> ReviewState:
        """Stored state for ``item_id``, or a fresh default if it was never tracked."""
        with self._lock:
            state = self._load()
            return state.items.get(item_id) or ReviewState.new(item_id, self._now())

    def reset(self) -> None:
        """Drop the whole persisted blob (review history included)."""
        with self._lock:
            try:
                self.store.delete(self.storage_key)
            except StoreError as exc:
                logger.error("srs_state_save_failed", key=self.storage_key, error=repr(exc))
                if self.raise_on_write_error:
                    raise
                return
        logger.info("srs_state_reset", key=self.storage_key)
