from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence

from .content import Item, tag_url
from .site import SectionID


def sort_items(items: Iterable[Item]) -> list[Item]:
    """Newest first; items sharing a date are ordered by URL."""
    by_url = sorted(items, key=lambda i: i.url)
    return sorted(by_url, key=lambda i: i.date, reverse=True)


class ItemCollection(Sequence[Item]):
    """Lightweight helper for working with lists of Items in templates and code."""

    def __init__(self, items: Iterable[Item]):
        self._items = list(items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def in_section(self, section: SectionID) -> ItemCollection:
        return ItemCollection(i for i in self._items if i.section == section)

    def with_tag(self, tag: str) -> ItemCollection:
        return ItemCollection(i for i in self._items if tag in i.tags)

    def sorted(self) -> ItemCollection:
        return ItemCollection(sort_items(self._items))

    def latest(self, count: int = 10) -> ItemCollection:
        return ItemCollection(self.sorted()[:count])

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"ItemCollection({len(self._items)} items)"


class TagCollection(Mapping[str, ItemCollection]):
    """Mapping of tag name to ItemCollection, iterated alphabetically."""

    def __init__(self, items: Iterable[Item]):
        mapping: dict[str, list[Item]] = {}
        for item in items:
            for tag in item.tags:
                mapping.setdefault(tag, []).append(item)
        self._mapping = {
            tag: ItemCollection(mapping[tag]) for tag in sorted(mapping, key=str.lower)
        }

    def __getitem__(self, key: str) -> ItemCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    @staticmethod
    def url(tag: str) -> str:
        return tag_url(tag)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagCollection({len(self._mapping)} tags)"
