import io
import sys
from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable, Optional


class Console(ABC):
    """Character console the interpreter prints to and reads from."""

    @abstractmethod
    def write(self, text: str):
        ...

    @abstractmethod
    def read_line(self) -> str:
        ...


class TerminalConsole(Console):
    def __init__(self, stream=None):
        self.stream = stream

    def write(self, text: str):
        stream = self.stream or sys.stdout
        stream.write(text)
        stream.flush()

    def read_line(self) -> str:
        try:
            return input()
        except EOFError:
            return ""


class BufferConsole(Console):
    """In-memory console: output collects in a buffer, input is scripted."""

    def __init__(self, inputs: Optional[Iterable[str]] = None):
        self.buffer = io.StringIO()
        self.inputs = deque(inputs or [])

    def write(self, text: str):
        self.buffer.write(text)

    def read_line(self) -> str:
        if not self.inputs:
            return ""
        return self.inputs.popleft()

    def feed(self, *lines: str):
        self.inputs.extend(lines)

    @property
    def output(self) -> str:
        return self.buffer.getvalue()

    def take(self) -> str:
        text = self.buffer.getvalue()
        self.buffer.seek(0)
        self.buffer.truncate()
        return text


__all__ = ["Console", "TerminalConsole", "BufferConsole"]
