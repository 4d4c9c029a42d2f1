"""A list with one focused entry and any number of selected entries."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class MultiSelectList(Generic[T]):
    """Items with a focused index and a set of selected indexes."""

    def __init__(self, items: Iterable[T]) -> None:
        self.items: list[T] = list(items)
        self.focused_index = 0
        self.selected: set[int] = set()

    def __len__(self) -> int:
        return len(self.items)

    def next(self) -> None:
        if self.items:
            self.focused_index = (self.focused_index + 1) % len(self.items)

    def prev(self) -> None:
        if self.items:
            self.focused_index = (self.focused_index - 1) % len(self.items)

    def toggle(self) -> None:
        """Flip the selection of the focused entry."""
        self.selected ^= {self.focused_index}

    def clear_selection(self) -> None:
        self.selected = set()

    def is_selected(self, index: int) -> bool:
        return index in self.selected

    def none_selected(self) -> bool:
        return not self.selected

    def focused_item(self) -> T:
        """Return the focused item; raises IndexError when nothing is focused."""
        if not 0 <= self.focused_index < len(self.items):
            raise IndexError("no item is focused")
        return self.items[self.focused_index]

    def set_items(self, items: Iterable[T]) -> None:
        """Replace the items, clamp focus and drop the selection."""
        new_items = list(items)
        if self.focused_index >= len(new_items):
            self.focused_index = len(new_items) - 1
        self.items = new_items
        self.selected = set()

    def selected_items(self) -> list[T]:
        """Selected items in list order."""
        return [item for index, item in enumerate(self.items) if index in self.selected]

    def selected_indexes(self) -> list[int]:
        """Selected indexes in ascending order."""
        return sorted(self.selected)

    def focus_first(self) -> None:
        self.focused_index = 0

    def entries(self) -> Iterator[tuple[T, bool, bool]]:
        """Yield each item with whether it is focused and whether it is selected."""
        for index, item in enumerate(self.items):
            yield item, index == self.focused_index, index in self.selected