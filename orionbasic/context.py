import random
from contextlib import contextmanager
from typing import List, Optional, Tuple

from orionbasic.config import DEFAULT_LIMITS, Limits
from orionbasic.console import Console, TerminalConsole
from orionbasic.data import DataItem
from orionbasic.errors import BasicError, ErrorCode, describe
from orionbasic.program import ProgramTable
from orionbasic.stacks import BoundedStack, ForFrame, GosubFrame
from orionbasic.variables import VariableStore


class InterpreterContext:
    """All mutable state of one interpreter session.

    Nothing here is shared between sessions; every handler receives the
    context it works on.
    """

    def __init__(self, limits: Limits = DEFAULT_LIMITS, console: Optional[Console] = None):
        self.limits = limits
        self.console = console or TerminalConsole()
        self.program = ProgramTable(limits)
        self.variables = VariableStore(limits)
        self.for_stack: BoundedStack[ForFrame] = BoundedStack("FOR", limits.stack_depth)
        self.gosub_stack: BoundedStack[GosubFrame] = BoundedStack("GOSUB", limits.stack_depth)
        self.data: List[DataItem] = []
        self.data_ptr = 0
        self.rng = random.Random(limits.rnd_seed)
        self.current_line: Optional[int] = None
        self.running = False
        self.depth = 0
        self.last_error: Optional[BasicError] = None
        self.error_code = ErrorCode.NONE
        self.error_message = describe(ErrorCode.NONE)

    def reset(self):
        # Resets everything except the console and limits
        self.program.clear()
        self.variables.clear()
        self.clear_stacks()
        self.data.clear()
        self.data_ptr = 0
        self.rng.seed(self.limits.rnd_seed)
        self.current_line = None
        self.running = False
        self.depth = 0
        self.clear_error()
        return self

    def clear_stacks(self):
        self.for_stack.clear()
        self.gosub_stack.clear()

    @contextmanager
    def nested(self):
        """Guard one level of IF or expression recursion."""
        if self.depth >= self.limits.max_nesting:
            raise BasicError(ErrorCode.STACK_OVERFLOW, "Nesting too deep")
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    def set_error(self, code: ErrorCode, message: Optional[str] = None):
        self.error_code = ErrorCode(code)
        self.error_message = message or describe(self.error_code)

    def record(self, error: BasicError):
        self.last_error = error
        self.set_error(error.code, error.summary)

    def clear_error(self):
        self.last_error = None
        self.set_error(ErrorCode.NONE)

    @property
    def error(self) -> Tuple[ErrorCode, str]:
        return self.error_code, self.error_message

    def next_data(self) -> DataItem:
        if self.data_ptr >= len(self.data):
            raise BasicError(ErrorCode.OUT_OF_DATA)
        item = self.data[self.data_ptr]
        self.data_ptr += 1
        return item


__all__ = ["InterpreterContext"]
