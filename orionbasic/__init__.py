from orionbasic.config import Limits
from orionbasic.console import BufferConsole, Console, TerminalConsole
from orionbasic.errors import BasicError, ErrorCode
from orionbasic.interpreter import Interpreter

__version__ = "0.1.0"

__all__ = [
    "Interpreter", "Limits", "Console", "TerminalConsole", "BufferConsole",
    "BasicError", "ErrorCode",
]
