import bisect
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from orionbasic.config import DEFAULT_LIMITS, Limits
from orionbasic.errors import BasicError, ErrorCode

LINE_PATTERN = re.compile(r'^([0-9]+)(?:[ \t]+(.*))?$')


@dataclass
class ProgramLine:
    number: int
    text: str

    def __str__(self):
        return f"{self.number} {self.text}" if self.text else str(self.number)


class ProgramTable:
    """Numbered program lines kept in ascending order.

    Storage is a sorted list of line numbers next to a parallel list of
    ``ProgramLine`` entries; ``bisect`` finds insertion points so that
    replacing an existing number overwrites it in place.
    """

    def __init__(self, limits: Limits = DEFAULT_LIMITS):
        self.limits = limits
        self._numbers: List[int] = []
        self._lines: List[ProgramLine] = []
        self.size = 0

    def _charge(self, text: str) -> int:
        return len(text) + self.limits.line_overhead

    def find(self, number: int) -> Optional[ProgramLine]:
        idx = bisect.bisect_left(self._numbers, number)
        if idx < len(self._numbers) and self._numbers[idx] == number:
            return self._lines[idx]
        return None

    def insert_or_replace(self, number: int, text: str) -> ProgramLine:
        if number < 0:
            raise BasicError(ErrorCode.SYNTAX, f"Invalid line number {number}")
        if len(text) > self.limits.max_line_length:
            raise BasicError(ErrorCode.PROGRAM_TOO_LARGE, "Line too long", line_number=number)

        idx = bisect.bisect_left(self._numbers, number)
        replacing = idx < len(self._numbers) and self._numbers[idx] == number
        refund = self._charge(self._lines[idx].text) if replacing else 0
        new_size = self.size - refund + self._charge(text)
        if new_size > self.limits.max_program_size:
            raise BasicError(ErrorCode.PROGRAM_TOO_LARGE, line_number=number)

        if replacing:
            self._lines[idx].text = text
            line = self._lines[idx]
        else:
            line = ProgramLine(number, text)
            self._numbers.insert(idx, number)
            self._lines.insert(idx, line)
        self.size = new_size
        return line

    def delete(self, number: int) -> bool:
        idx = bisect.bisect_left(self._numbers, number)
        if idx < len(self._numbers) and self._numbers[idx] == number:
            self.size -= self._charge(self._lines[idx].text)
            del self._numbers[idx]
            del self._lines[idx]
            return True
        return False

    def clear(self):
        self._numbers.clear()
        self._lines.clear()
        self.size = 0

    def first(self) -> Optional[ProgramLine]:
        return self._lines[0] if self._lines else None

    def next_after(self, number: int) -> Optional[ProgramLine]:
        idx = bisect.bisect_right(self._numbers, number)
        if idx < len(self._lines):
            return self._lines[idx]
        return None

    def lines(self) -> Iterator[ProgramLine]:
        return iter(list(self._lines))

    def listing(self) -> str:
        return "\n".join(str(line) for line in self._lines)

    def __iter__(self):
        return self.lines()

    def __len__(self):
        return len(self._lines)

    def __contains__(self, number: int):
        return self.find(number) is not None


def parse_program(text: str) -> List[Tuple[int, str]]:
    """Split program text into ``(line number, statement text)`` pairs.

    Blank lines are skipped. Any other line must open with a decimal line
    number followed by spaces or tabs and the statement text.
    """
    entries = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        match = LINE_PATTERN.match(line)
        if not match:
            column = 0
            while column < len(line) and '0' <= line[column] <= '9':
                column += 1
            message = "Expected line number" if column == 0 else "Expected space after line number"
            raise BasicError(ErrorCode.SYNTAX, message, column=column, source=line)
        entries.append((int(match.group(1)), match.group(2) or ""))
    return entries


__all__ = ["ProgramLine", "ProgramTable", "parse_program"]
