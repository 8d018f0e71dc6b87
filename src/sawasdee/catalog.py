from __future__ import annotations

from typing import Iterable, Iterator, Optional

from .models.vocabulary import Difficulty, VocabularyItem
from .vocabulary_data import VOCABULARY


class VocabularyCatalog:
    """Read-only, ordered collection of vocabulary entries.

    スケジューラはこの一覧を走査して「未学習」「期限到来」を判定するだけで、
    内容を書き換えることはない。
    """

    def __init__(self, items: Iterable[VocabularyItem]) -> None:
        self._items: tuple[VocabularyItem, ...] = tuple(items)
        self._by_id: dict[str, VocabularyItem] = {it.id: it for it in self._items}

    @classmethod
    def from_records(cls, rows: Iterable[tuple[str, str, str, str, str, str]]) -> "VocabularyCatalog":
        items = [
            VocabularyItem(
                id=rid,
                text=thai,
                romanization=romanization,
                translation=english,
                category=category,
                difficulty=Difficulty(difficulty),
            )
            for rid, thai, romanization, english, category, difficulty in rows
        ]
        return cls(items)

    def __iter__(self) -> Iterator[VocabularyItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> Optional[VocabularyItem]:
        return self._by_id.get(item_id)

    def is_known_item(self, item_id: str) -> bool:
        return item_id in self._by_id


def default_catalog() -> VocabularyCatalog:
    """Catalog built from the bundled Thai vocabulary table."""
    return VocabularyCatalog.from_records(VOCABULARY)
