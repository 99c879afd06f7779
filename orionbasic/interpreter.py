from typing import Optional, Tuple, Union

from orionbasic.config import DEFAULT_LIMITS, Limits
from orionbasic.console import Console
from orionbasic.context import InterpreterContext
from orionbasic.data import build_pool
from orionbasic.errors import BasicError, ErrorCode
from orionbasic.evaluator import Evaluator
from orionbasic.executor import Executor, Fail, Halt, JumpTo
from orionbasic.logging import get_logger
from orionbasic.program import parse_program

logger = get_logger(__name__)


class Interpreter:
    """One BASIC session: a program, its variables and its run state.

    The public calls never raise ``BasicError``; they return ``False`` and
    leave the failure in ``error`` as a ``(code, message)`` pair.
    """

    def __init__(self, limits: Optional[Limits] = None, console: Optional[Console] = None):
        self.ctx = InterpreterContext(limits or DEFAULT_LIMITS, console)
        self.evaluator = Evaluator(self.ctx)
        self.executor = Executor(self.ctx, self.evaluator)

    @property
    def error(self) -> Tuple[ErrorCode, str]:
        return self.ctx.error

    @property
    def program(self):
        return self.ctx.program

    @property
    def variables(self):
        return self.ctx.variables

    @property
    def console(self) -> Console:
        return self.ctx.console

    def value(self, name: str) -> Union[float, str, None]:
        """Current scalar value of a variable, or None if it doesn't exist."""
        var = self.ctx.variables.find(name)
        return getattr(var, "value", None)

    def init(self):
        self.ctx.reset()
        logger.info("Session reset")

    def load_program(self, text: str) -> bool:
        self.init()
        try:
            for number, line in parse_program(text):
                self.ctx.program.insert_or_replace(number, line)
        except BasicError as e:
            self.ctx.program.clear()
            return self._fail(e)

        self.ctx.data = build_pool(self.ctx.program)
        logger.info(
            f"Loaded {len(self.ctx.program)} lines ({self.ctx.program.size} bytes), "
            f"{len(self.ctx.data)} DATA values"
        )
        return True

    def enter_line(self, number: int, text: str) -> bool:
        """Add, replace or (with empty text) delete one program line."""
        self.ctx.clear_error()
        if not text.strip():
            self.ctx.program.delete(number)
            return True
        try:
            self.ctx.program.insert_or_replace(number, text)
        except BasicError as e:
            return self._fail(e)
        return True

    def run(self) -> bool:
        self.ctx.clear_error()
        first = self.ctx.program.first()
        if first is None:
            return self._fail(BasicError(ErrorCode.SYNTAX, "No program loaded"))

        self.ctx.clear_stacks()
        self.ctx.data = build_pool(self.ctx.program)
        self.ctx.data_ptr = 0
        ok = self._execute_from(first.number)
        if ok:
            logger.info("Run finished")
        return ok

    def execute_line(self, text: str) -> bool:
        """Execute statements typed in immediate mode."""
        self.ctx.clear_error()
        if len(text) > self.ctx.limits.max_line_length:
            return self._fail(BasicError(ErrorCode.PROGRAM_TOO_LARGE, "Line too long"))
        return self._execute_from(None, immediate=text)

    def _execute_from(self, line_number: Optional[int], offset: int = 0, immediate: str = "") -> bool:
        ctx = self.ctx
        ctx.running = True
        in_branch = False
        try:
            while ctx.running:
                if line_number is None:
                    text = immediate
                else:
                    line = ctx.program.find(line_number)
                    if line is None:
                        return self._fail(BasicError(ErrorCode.LINE_NOT_FOUND, f"Line {line_number} not found"))
                    text = line.text

                ctx.current_line = line_number
                outcome = self.executor.execute(text, offset, in_branch)

                if isinstance(outcome, Fail):
                    return self._fail(outcome.error)
                if isinstance(outcome, Halt):
                    break
                if isinstance(outcome, JumpTo):
                    line_number, offset = outcome.line_number, outcome.offset
                    in_branch = outcome.in_branch
                    continue

                # Fell off the end of the line
                if line_number is None:
                    break
                following = ctx.program.next_after(line_number)
                if following is None:
                    break
                line_number, offset = following.number, 0
                in_branch = False
        finally:
            ctx.running = False
        return True

    def _fail(self, error: BasicError) -> bool:
        self.ctx.record(error)
        if error.line_number is not None:
            logger.error(f"Runtime error at line {error.line_number}: {error.message}")
        else:
            logger.error(f"Error: {error.message}")
        return False


__all__ = ["Interpreter"]
