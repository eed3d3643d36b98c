from __future__ import annotations

from typing import Hashable, Iterable, Mapping, Protocol


class ItemTagDAO(Protocol):
    """
    Source of items and their tags. The model builder only needs these three calls.
    """

    def get_tag_vocabulary(self) -> set[str]: ...

    def get_item_ids(self) -> set[Hashable]: ...

    def get_item_tags(self, item: Hashable) -> list[str]: ...


class MemoryItemTagDAO:
    """
    ItemTagDAO over item -> tag list data already held in memory.
    """

    def __init__(self, item_tags: Mapping[Hashable, Iterable[str]]):
        self._item_tags: dict[Hashable, list[str]] = {item: list(tags) for item, tags in item_tags.items()}
        self._vocabulary = {t for tags in self._item_tags.values() for t in tags}

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[Hashable, str]]) -> "MemoryItemTagDAO":
        """
        Builds the DAO from (item, tag) rows, e.g. the rows of a tag table.
        Repeated rows count as repeated tag applications.
        """
        item_tags: dict[Hashable, list[str]] = {}
        for item, tag in pairs:
            item_tags.setdefault(item, []).append(tag)
        return cls(item_tags)

    def get_tag_vocabulary(self) -> set[str]:
        return set(self._vocabulary)

    def get_item_ids(self) -> set[Hashable]:
        return set(self._item_tags.keys())

    def get_item_tags(self, item: Hashable) -> list[str]:
        return list(self._item_tags.get(item, []))
