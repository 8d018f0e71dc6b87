from datetime import UTC, datetime
from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .vocabulary import Difficulty, VocabularyItem


DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_INTERVAL_DAYS = 36500
PASSING_QUALITY = 3


class ReviewQuality(IntEnum):
    """SM-2 recall quality (0-5). 3 以上が「正解」扱い。"""

    BLACKOUT = 0
    INCORRECT = 1
    INCORRECT_EASY = 2
    DIFFICULT = 3
    HESITANT = 4
    PERFECT = 5

    @property
    def passed(self) -> bool:
        return self >= PASSING_QUALITY


# 復習画面の4ボタンと品質値の対応
RATING_BUTTONS: dict[str, ReviewQuality] = {
    "Again": ReviewQuality.BLACKOUT,
    "Hard": ReviewQuality.INCORRECT_EASY,
    "Good": ReviewQuality.DIFFICULT,
    "Easy": ReviewQuality.PERFECT,
}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # 旧データにタイムゾーン無しの値があれば UTC とみなす
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class ReviewState(BaseModel):
    """Per-item scheduling state, persisted under ``words[<itemId>]``.

    - ease_factor: 間隔の伸び率（下限 1.3）
    - interval: 次回までの日数
    - repetitions: 連続正解回数（品質 < 3 で 0 に戻る）
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    item_id: str = Field(alias="wordId")
    ease_factor: float = Field(default=DEFAULT_EASE_FACTOR, alias="easeFactor")
    interval: int = Field(default=0, ge=0)
    repetitions: int = Field(default=0, ge=0)
    next_review_date: datetime = Field(alias="nextReviewDate")
    last_review_date: Optional[datetime] = Field(default=None, alias="lastReviewDate")
    total_reviews: int = Field(default=0, alias="totalReviews")
    correct_reviews: int = Field(default=0, alias="correctReviews")

    @field_validator("next_review_date", "last_review_date")
    @classmethod
    def _normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    @classmethod
    def new(cls, item_id: str, now: datetime) -> "ReviewState":
        """A never-reviewed state that is due immediately."""
        return cls(item_id=item_id, next_review_date=now)

    def is_due(self, now: datetime) -> bool:
        return now >= self.next_review_date

    @property
    def is_mastered(self) -> bool:
        return self.repetitions >= 5 and self.ease_factor >= 2.0


class SchedulerState(BaseModel):
    """The whole persisted blob. 欠けたフィールドは既定値で補う。"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    items: dict[str, ReviewState] = Field(default_factory=dict, alias="words")
    last_session_date: Optional[datetime] = Field(default=None, alias="lastSessionDate")
    total_words_learned: int = Field(default=0, alias="totalWordsLearned")
    current_streak: int = Field(default=0, alias="currentStreak")

    @field_validator("last_session_date")
    @classmethod
    def _normalize_session_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class ReviewStats(BaseModel):
    total_words_learned: int
    words_for_review: int
    mastered_words: int
    review_streak: int


# --- HTTP models ---


class ReviewCard(BaseModel):
    """A single review card to display on the frontend."""

    id: str
    text: str
    translation: str
    difficulty: Difficulty
    romanization: Optional[str] = None

    @classmethod
    def from_item(cls, item: VocabularyItem) -> "ReviewCard":
        return cls(
            id=item.id,
            text=item.text,
            translation=item.translation,
            difficulty=item.difficulty,
            romanization=item.romanization,
        )


class ReviewItemsResponse(BaseModel):
    items: list[ReviewCard]
    total: int


class ReviewGradeRequest(BaseModel):
    """Request model for submitting a review grade.

    - item_id: 語彙 ID
    - quality: 0..5 の想起品質
    """

    item_id: str = Field(min_length=1, max_length=128)
    quality: int = Field(ge=0, le=5, strict=True)


class ReviewGradeResponse(BaseModel):
    ok: bool
    item_id: str
    next_due: datetime
    interval: int
    ease_factor: float
    repetitions: int


class ReviewSaveRequest(BaseModel):
    """ストーリー等から語を復習リストへ追加するリクエスト。"""

    item_id: str = Field(min_length=1, max_length=128)
    text: Optional[str] = None
    romanization: Optional[str] = None
    translation: Optional[str] = None


class ReviewSaveResponse(BaseModel):
    ok: bool
    created: bool


class ReviewSavedResponse(BaseModel):
    item_id: str
    saved: bool
