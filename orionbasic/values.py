import math
import re

from orionbasic.errors import BasicError, ErrorCode

# Leading numeric prefix, the way C's atof() reads it.
NUMBER_PREFIX = re.compile(r'^[ \t]*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)')


def coerce_number(text: str) -> float:
    """Permissive string to number conversion; no numeric prefix gives 0."""
    match = NUMBER_PREFIX.match(text)
    if not match:
        return 0.0
    return float(match.group(1))


def format_number(value: float) -> str:
    return "%.6f" % value


def to_index(value: float) -> int:
    """Array subscripts and extents truncate toward negative infinity."""
    if math.isnan(value) or math.isinf(value):
        raise BasicError(ErrorCode.ILLEGAL_FUNCTION_CALL, "Invalid subscript")
    return int(math.floor(value))


def to_line_number(value: float) -> int:
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise BasicError(ErrorCode.SYNTAX, "Invalid line number")
    return int(value)


__all__ = ["coerce_number", "format_number", "to_index", "to_line_number"]
