import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from orionbasic.program import ProgramLine

NUMERIC_ITEM = re.compile(r'^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)$')
DATA_STATEMENT = re.compile(r"[ \t]*DATA(?![A-Za-z0-9$])", re.IGNORECASE)
REM_STATEMENT = re.compile(r"[ \t]*REM(?![A-Za-z0-9$])", re.IGNORECASE)


@dataclass
class DataItem:
    text: str
    number: Optional[float] = None

    @property
    def is_numeric(self) -> bool:
        return self.number is not None


def parse_item(raw: str) -> DataItem:
    item = raw.strip(" \t")
    if len(item) >= 2 and item.startswith('"') and item.endswith('"'):
        return DataItem(item[1:-1])
    if NUMERIC_ITEM.match(item):
        return DataItem(item, float(item))
    return DataItem(item)


def split_data(text: str, start: int = 0) -> Tuple[List[DataItem], int]:
    """Read the comma-separated values of one DATA statement.

    Scanning stops at a ``:`` outside quotes or at the end of the line;
    returns the items and the offset where scanning stopped.
    """
    items = []
    current = []
    quoted = False
    pos = start
    while pos < len(text):
        char = text[pos]
        if char == '"':
            quoted = not quoted
        elif not quoted and char == ',':
            items.append(parse_item("".join(current)))
            current = []
            pos += 1
            continue
        elif not quoted and char == ':':
            break
        current.append(char)
        pos += 1
    if items or "".join(current).strip():
        items.append(parse_item("".join(current)))
    return items, pos


def statement_starts(text: str) -> Iterator[int]:
    """Offsets where statements begin: 0 and after every unquoted ``:``."""
    yield 0
    quoted = False
    for pos, char in enumerate(text):
        if char == '"':
            quoted = not quoted
        elif char == ':' and not quoted:
            yield pos + 1


def build_pool(lines: Iterable[ProgramLine]) -> List[DataItem]:
    """Collect the values of every DATA statement in line order."""
    pool = []
    for line in lines:
        for start in statement_starts(line.text):
            if REM_STATEMENT.match(line.text, start):
                break
            match = DATA_STATEMENT.match(line.text, start)
            if match:
                items, _ = split_data(line.text, match.end())
                pool.extend(items)
    return pool


__all__ = ["DataItem", "parse_item", "split_data", "statement_starts", "build_pool"]
