"""A list with a single focused entry that wraps around when moved."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class FocusableList(Generic[T]):
    """Items with one focused position; the first item is focused initially."""

    def __init__(self, items: Iterable[T]) -> None:
        self.items: list[T] = list(items)
        self.current = 0

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def focus(self, item: T) -> FocusableList[T]:
        """Focus the first entry equal to ``item``; unchanged if absent."""
        for index, value in enumerate(self.items):
            if value == item:
                self.current = index
                break
        return self

    def next(self) -> None:
        """Move focus forward, wrapping to the start."""
        if self.items:
            self.current = (self.current + 1) % len(self.items)

    def prev(self) -> None:
        """Move focus backward, wrapping to the end."""
        if self.items:
            self.current = (self.current - 1) % len(self.items)

    def focused(self) -> T:
        """Return the focused item; raises IndexError when nothing is focused."""
        if not 0 <= self.current < len(self.items):
            raise IndexError("no item is focused")
        return self.items[self.current]

    def focus_first(self) -> None:
        self.current = 0

    def set_items(self, items: Iterable[T]) -> None:
        """Replace the items, pulling focus back inside the new list."""
        new_items = list(items)
        if self.current >= len(new_items):
            self.current = len(new_items) - 1
        self.items = new_items

    def entries(self) -> Iterator[tuple[T, bool]]:
        """Yield each item together with whether it is focused."""
        for index, item in enumerate(self.items):
            yield item, index == self.current