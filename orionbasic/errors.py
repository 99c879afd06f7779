from enum import IntEnum
from typing import Optional


class ErrorCode(IntEnum):
    NONE = 0
    SYNTAX = 1
    OUT_OF_MEMORY = 2
    UNDEFINED_VARIABLE = 3
    TYPE_MISMATCH = 4
    DIVISION_BY_ZERO = 5
    ARRAY_BOUNDS = 6
    STACK_OVERFLOW = 7
    PROGRAM_TOO_LARGE = 8
    LINE_NOT_FOUND = 9
    NEXT_WITHOUT_FOR = 10
    RETURN_WITHOUT_GOSUB = 11
    OUT_OF_DATA = 12
    ILLEGAL_FUNCTION_CALL = 13
    OVERFLOW = 14


MESSAGES = {
    ErrorCode.NONE: "No error",
    ErrorCode.SYNTAX: "Syntax error",
    ErrorCode.OUT_OF_MEMORY: "Out of memory",
    ErrorCode.UNDEFINED_VARIABLE: "Undefined variable",
    ErrorCode.TYPE_MISMATCH: "Type mismatch",
    ErrorCode.DIVISION_BY_ZERO: "Division by zero",
    ErrorCode.ARRAY_BOUNDS: "Array bounds error",
    ErrorCode.STACK_OVERFLOW: "Stack overflow",
    ErrorCode.PROGRAM_TOO_LARGE: "Program too large",
    ErrorCode.LINE_NOT_FOUND: "Line not found",
    ErrorCode.NEXT_WITHOUT_FOR: "NEXT without FOR",
    ErrorCode.RETURN_WITHOUT_GOSUB: "RETURN without GOSUB",
    ErrorCode.OUT_OF_DATA: "Out of DATA",
    ErrorCode.ILLEGAL_FUNCTION_CALL: "Illegal function call",
    ErrorCode.OVERFLOW: "Overflow",
}


def describe(code: ErrorCode) -> str:
    return MESSAGES.get(code, "Unknown error")


class BasicError(Exception):
    """The one error type raised by the interpreter core.

    ``line_number`` is filled in by the run loop when the statement that
    failed belongs to a stored program line; ``column`` and ``source`` are
    set by the lexer-level code that knows where the offending text is.
    """

    def __init__(self, code: ErrorCode, message: Optional[str] = None,
                 line_number: Optional[int] = None, column: Optional[int] = None,
                 source: Optional[str] = None):
        self.code = ErrorCode(code)
        self.message = message or describe(self.code)
        self.line_number = line_number
        self.column = column
        self.source = source
        super().__init__(self.message)

    @property
    def summary(self) -> str:
        if self.line_number is not None:
            return f"Line {self.line_number}: {self.message}"
        return self.message

    def __str__(self):
        text = self.summary
        if self.source is not None and self.column is not None:
            pointer = " " * self.column + "^"
            return f"{text}\n{self.source}\n{pointer}"
        return text

    def locate(self, source: str, column: int) -> "BasicError":
        if self.source is None:
            self.source = source
            self.column = column
        return self


__all__ = ["ErrorCode", "BasicError", "describe", "MESSAGES"]
