from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Difficulty(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"

    @property
    def rank(self) -> int:
        """Sort rank: beginner < intermediate < advanced."""
        return _DIFFICULTY_RANK[self]


_DIFFICULTY_RANK = {
    Difficulty.beginner: 0,
    Difficulty.intermediate: 1,
    Difficulty.advanced: 2,
}


class VocabularyItem(BaseModel):
    """A single catalog entry.

    カタログ上の語彙（読み取り専用）。text はタイ語表記、translation は英訳。
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    text: str
    translation: str
    difficulty: Difficulty = Difficulty.beginner
    romanization: Optional[str] = None
    category: Optional[str] = None
