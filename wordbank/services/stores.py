from collections.abc import Iterator

from wordbank.models.progress import ProgressRecord, WordStatus
from wordbank.models.vocab import VocabularyItem
from wordbank.utils.normalize import fold_source_text


class WordStore:
    """Catalog of vocabulary items in insertion order."""

    def __init__(self, items: list[VocabularyItem] | None = None):
        self._items: dict[str, VocabularyItem] = {}
        for item in items or []:
            self.put(item)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __iter__(self) -> Iterator[VocabularyItem]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    @property
    def by_id(self) -> dict[str, VocabularyItem]:
        return self._items

    def get(self, item_id: str) -> VocabularyItem | None:
        return self._items.get(item_id)

    def find_by_source_text(self, source_text: str) -> VocabularyItem | None:
        key = fold_source_text(source_text)
        for item in self._items.values():
            if fold_source_text(item.sourceText) == key:
                return item
        return None

    def put(self, item: VocabularyItem) -> None:
        self._items[item.id] = item

    def remove(self, item_id: str) -> VocabularyItem | None:
        return self._items.pop(item_id, None)


class ProgressStore:
    """One mutable progress record per item id."""

    def __init__(self, records: list[ProgressRecord] | None = None):
        self._records: dict[str, ProgressRecord] = {}
        for record in records or []:
            self.put(record)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._records

    def __iter__(self) -> Iterator[ProgressRecord]:
        return iter(list(self._records.values()))

    def __len__(self) -> int:
        return len(self._records)

    def get(self, item_id: str) -> ProgressRecord | None:
        return self._records.get(item_id)

    def put(self, record: ProgressRecord) -> None:
        self._records[record.itemId] = record

    def remove(self, item_id: str) -> ProgressRecord | None:
        return self._records.pop(item_id, None)

    def count_by_status(self) -> dict[WordStatus, int]:
        counts = {status: 0 for status in WordStatus}
        for record in self._records.values():
            counts[record.status] += 1
        return counts
