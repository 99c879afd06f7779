import math
import random
from typing import Callable, Dict

from orionbasic.errors import BasicError, ErrorCode
from orionbasic.values import coerce_number, format_number


def _sqr(x: float) -> float:
    if x < 0:
        raise BasicError(ErrorCode.ILLEGAL_FUNCTION_CALL, "SQR of negative number")
    return math.sqrt(x)


def _log(x: float) -> float:
    if x <= 0:
        raise BasicError(ErrorCode.ILLEGAL_FUNCTION_CALL, "LOG of non-positive number")
    return math.log(x)


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        raise BasicError(ErrorCode.OVERFLOW, "EXP overflow")


def _int(x: float) -> float:
    if math.isinf(x) or math.isnan(x):
        return x
    return float(math.floor(x))


def _sgn(x: float) -> float:
    if x > 0:
        return 1.0
    if x < 0:
        return -1.0
    return 0.0


def _trig(fn: Callable[[float], float]) -> Callable[[float], float]:
    def wrapper(x: float) -> float:
        try:
            return fn(x)
        except ValueError:
            raise BasicError(ErrorCode.ILLEGAL_FUNCTION_CALL, f"{fn.__name__.upper()} of {x}")
    return wrapper


# One numeric argument in, one number out. RND is bound per session.
NUMERIC_FUNCTIONS: Dict[str, Callable[[float], float]] = {
    "ABS": abs,
    "SQR": _sqr,
    "SIN": _trig(math.sin),
    "COS": _trig(math.cos),
    "TAN": _trig(math.tan),
    "LOG": _log,
    "EXP": _exp,
    "INT": _int,
    "SGN": _sgn,
}


def make_rnd(rng: random.Random) -> Callable[[float], float]:
    def rnd(x: float) -> float:
        return rng.random() * x
    return rnd


def _asc(s: str) -> float:
    if not s:
        raise BasicError(ErrorCode.ILLEGAL_FUNCTION_CALL, "ASC of empty string")
    return float(ord(s[0]))


# String argument, numeric result
STRING_ARG_FUNCTIONS: Dict[str, Callable[[str], float]] = {
    "LEN": lambda s: float(len(s)),
    "VAL": coerce_number,
    "ASC": _asc,
}


def _chr(code: float) -> str:
    if not math.isfinite(code) or not 0 <= code < 0x110000:
        raise BasicError(ErrorCode.ILLEGAL_FUNCTION_CALL, f"CHR$ of {code}")
    return chr(int(code))


def _count(n: float) -> int:
    if not math.isfinite(n) or n < 0:
        raise BasicError(ErrorCode.ILLEGAL_FUNCTION_CALL, f"Invalid length {n}")
    return int(n)


def _left(s: str, n: float) -> str:
    return s[:_count(n)]


def _right(s: str, n: float) -> str:
    n = _count(n)
    return s[len(s) - n:] if n else ""


def _mid(s: str, start: float, n: float = None) -> str:
    if not math.isfinite(start) or start < 1:
        raise BasicError(ErrorCode.ILLEGAL_FUNCTION_CALL, "MID$ start must be 1 or more")
    begin = int(start) - 1
    if n is None:
        return s[begin:]
    return s[begin:begin + _count(n)]


# Functions with a string result; the tuple lists argument kinds.
STRING_FUNCTIONS = {
    "CHR$": (_chr, ("num",)),
    "STR$": (format_number, ("num",)),
    "LEFT$": (_left, ("str", "num")),
    "RIGHT$": (_right, ("str", "num")),
    "MID$": (_mid, ("str", "num", "num?")),
}


__all__ = [
    "NUMERIC_FUNCTIONS", "STRING_ARG_FUNCTIONS", "STRING_FUNCTIONS",
    "make_rnd",
]
