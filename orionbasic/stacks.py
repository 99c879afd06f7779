from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from orionbasic.errors import BasicError, ErrorCode


@dataclass
class ForFrame:
    variable: str
    limit: float
    step: float
    # Where the loop body starts: the FOR line and the offset just past the
    # FOR statement (end of text when FOR closed its line).
    line_number: Optional[int]
    resume_offset: int
    # Pushed inside a THEN or ELSE branch: an ELSE at the resume point ends the line
    in_branch: bool = False


@dataclass
class GosubFrame:
    return_line_number: Optional[int]
    resume_offset: int
    in_branch: bool = False


T = TypeVar("T")


class BoundedStack(Generic[T]):
    def __init__(self, name: str, capacity: int = 32):
        self.name = name
        self.capacity = capacity
        self._items: List[T] = []

    def push(self, item: T):
        if len(self._items) >= self.capacity:
            raise BasicError(ErrorCode.STACK_OVERFLOW, f"{self.name} stack overflow")
        self._items.append(item)

    def pop(self) -> T:
        return self._items.pop()

    def top(self) -> Optional[T]:
        return self._items[-1] if self._items else None

    def find(self, predicate) -> int:
        """Index of the innermost item matching ``predicate``, or -1."""
        for i in range(len(self._items) - 1, -1, -1):
            if predicate(self._items[i]):
                return i
        return -1

    def unwind(self, index: int):
        del self._items[index:]

    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def clear(self):
        self._items.clear()

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items)

    def __iter__(self):
        return iter(list(self._items))


__all__ = ["ForFrame", "GosubFrame", "BoundedStack"]
