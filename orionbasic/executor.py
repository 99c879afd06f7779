from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from orionbasic.context import InterpreterContext
from orionbasic.data import split_data
from orionbasic.errors import BasicError, ErrorCode
from orionbasic.evaluator import Evaluator
from orionbasic.lexer import Lexer
from orionbasic.logging import get_logger
from orionbasic.stacks import ForFrame, GosubFrame
from orionbasic.tokens import (
    ADDITIVE, MULTIPLICATIVE, STATEMENT_END, Token, TokenType,
)
from orionbasic.values import coerce_number, format_number, to_line_number
from orionbasic.variables import is_string_name

logger = get_logger(__name__)


# Statement outcomes consumed by the run loop

@dataclass(frozen=True)
class Continue:
    pass


@dataclass(frozen=True)
class JumpTo:
    line_number: Optional[int]
    offset: int = 0
    in_branch: bool = False


@dataclass(frozen=True)
class Halt:
    pass


@dataclass(frozen=True)
class Fail:
    error: BasicError


Outcome = Union[Continue, JumpTo, Halt, Fail]

CONTINUE = Continue()
HALT = Halt()

Target = Tuple[str, Optional[List[int]]]


class Executor:
    def __init__(self, ctx: InterpreterContext, evaluator: Optional[Evaluator] = None):
        self.ctx = ctx
        self.evaluator = evaluator or Evaluator(ctx)
        self.branch_depth = 0

    def execute(self, text: str, offset: int = 0, in_branch: bool = False) -> Outcome:
        """Run the statements of one line starting at ``offset``.

        ``in_branch`` is set when resuming inside a THEN or ELSE branch.
        Errors never escape: they come back as a ``Fail`` outcome carrying
        the line number and position of the failure.
        """
        lexer = Lexer(text, offset, self.ctx.limits.max_identifier_length)
        self.branch_depth = 1 if in_branch else 0
        try:
            return self.statements(lexer, in_branch)
        except BasicError as e:
            e.locate(text, min(lexer.start, len(text)))
            if e.line_number is None:
                e.line_number = self.ctx.current_line
            return Fail(e)

    def statements(self, lexer: Lexer, in_branch: bool = False) -> Outcome:
        while True:
            token = lexer.peek_token()
            if token.type == TokenType.EOL:
                return CONTINUE
            if token.type == TokenType.COLON:
                lexer.next_token()
                continue
            if token.type == TokenType.ELSE:
                if not in_branch:
                    self.error(lexer, "ELSE without IF", token)
                # THEN branch finished; the ELSE part is skipped
                lexer.position = len(lexer.source)
                return CONTINUE

            outcome = self.statement(lexer)
            if outcome is not CONTINUE:
                return outcome

            token = lexer.peek_token()
            if token.type not in STATEMENT_END:
                self.error(lexer, f"Unexpected {token.type.value}", token)

    def statement(self, lexer: Lexer) -> Outcome:
        token = lexer.next_token()
        logger.debug(f"line {self.ctx.current_line}: {token.type.value}")

        if token.type == TokenType.PRINT:
            return self.execute_print(lexer)
        elif token.type == TokenType.INPUT:
            return self.execute_input(lexer)
        elif token.type == TokenType.LET:
            return self.execute_let(lexer)
        elif token.type in (TokenType.VARIABLE, TokenType.FUNCTION):
            # Implicit LET: rewind over the name
            lexer.position = token.column
            return self.execute_let(lexer)
        elif token.type == TokenType.IF:
            return self.execute_if(lexer)
        elif token.type == TokenType.FOR:
            return self.execute_for(lexer)
        elif token.type == TokenType.NEXT:
            return self.execute_next(lexer)
        elif token.type == TokenType.GOSUB:
            return self.execute_gosub(lexer)
        elif token.type == TokenType.RETURN:
            return self.execute_return(lexer)
        elif token.type == TokenType.GOTO:
            return self.execute_goto(lexer)
        elif token.type == TokenType.READ:
            return self.execute_read(lexer)
        elif token.type == TokenType.DATA:
            # Values were collected at load time
            _, lexer.position = split_data(lexer.source, lexer.position)
            return CONTINUE
        elif token.type == TokenType.RESTORE:
            self.ctx.data_ptr = 0
            logger.debug("RESTORE: DATA pointer reset to 0")
            return CONTINUE
        elif token.type == TokenType.DIM:
            return self.execute_dim(lexer)
        elif token.type in (TokenType.END, TokenType.STOP):
            self.ctx.running = False
            logger.debug(f"{token.type.value} at line {self.ctx.current_line}")
            return HALT
        elif token.type == TokenType.REM:
            lexer.position = len(lexer.source)
            return CONTINUE
        else:
            self.error(lexer, f"Unrecognized statement: {token.type.value}", token)

    # I/O

    def execute_print(self, lexer: Lexer) -> Outcome:
        output = []
        last = None

        while True:
            token = lexer.peek_token()
            if token.type in STATEMENT_END:
                break

            if token.type == TokenType.COMMA:
                lexer.next_token()
                output.append(self.ctx.limits.print_separator)
                last = token.type
                continue

            if token.type == TokenType.SEMICOLON:
                lexer.next_token()
                last = token.type
                continue

            output.append(self.print_item(lexer))
            last = None

        text = ''.join(output)
        if last != TokenType.SEMICOLON:
            text += "\n"
        self.ctx.console.write(text)
        logger.debug(f"PRINT: {text!r}")
        return CONTINUE

    def print_item(self, lexer: Lexer) -> str:
        if self.evaluator.starts_string(lexer):
            saved = lexer.position
            text = self.evaluator.string_expression(lexer)
            following = lexer.peek_token().type
            if following not in ADDITIVE and following not in MULTIPLICATIVE:
                return text
            # The string is an operand of a numeric expression
            lexer.position = saved
        return format_number(self.evaluator.expression(lexer))

    def execute_input(self, lexer: Lexer) -> Outcome:
        console = self.ctx.console

        while True:
            token = lexer.peek_token()
            if token.type in STATEMENT_END:
                break

            if token.type == TokenType.STRING:
                lexer.next_token()
                console.write(token.value)
                if lexer.peek_token().type in (TokenType.SEMICOLON, TokenType.COMMA):
                    lexer.next_token()
                continue

            target = self.parse_target(lexer)
            console.write(self.ctx.limits.input_marker)
            reply = console.read_line()
            value = reply if is_string_name(target[0]) else coerce_number(reply)
            self.assign(target, value)
            logger.debug(f"INPUT {target[0]} = {value!r}")

            if lexer.peek_token().type == TokenType.COMMA:
                lexer.next_token()
            elif lexer.peek_token().type not in STATEMENT_END:
                self.error(lexer, "Expected , between INPUT variables")

        return CONTINUE

    # assignment

    def parse_target(self, lexer: Lexer) -> Target:
        token = lexer.next_token()
        if token.type not in (TokenType.VARIABLE, TokenType.FUNCTION):
            self.error(lexer, "Expected variable name", token)
        indices = None
        if lexer.peek_token().type == TokenType.LPAREN:
            indices = self.evaluator.subscripts(lexer)
        return token.value, indices

    def assign(self, target: Target, value: Union[float, str]):
        name, indices = target
        if indices is None:
            self.ctx.variables.assign(name, value)
        else:
            self.ctx.variables.assign_element(name, indices, value)

    def execute_let(self, lexer: Lexer) -> Outcome:
        target = self.parse_target(lexer)
        self.expect(lexer, TokenType.EQUALS, "Expected equals sign")

        # Evaluate fully before touching the store
        if is_string_name(target[0]):
            value = self.evaluator.string_expression(lexer)
        else:
            value = self.evaluator.expression(lexer)

        self.assign(target, value)
        logger.debug(f"LET {target[0]}{target[1] or ''} = {value!r}")
        return CONTINUE

    # control flow

    def execute_if(self, lexer: Lexer) -> Outcome:
        condition = self.evaluator.expression(lexer)
        self.expect(lexer, TokenType.THEN, "Expected THEN")

        if condition != 0:
            return self.branch(lexer)

        if self.skip_to_else(lexer):
            return self.branch(lexer)
        lexer.position = len(lexer.source)
        return CONTINUE

    def branch(self, lexer: Lexer) -> Outcome:
        with self.ctx.nested():
            if lexer.peek_token().type == TokenType.NUMBER:
                # THEN 100 / ELSE 100
                return self.jump(lexer, self.line_number(lexer))
            self.branch_depth += 1
            try:
                return self.statements(lexer, in_branch=True)
            finally:
                self.branch_depth -= 1

    def skip_to_else(self, lexer: Lexer) -> bool:
        while True:
            token = lexer.next_token()
            if token.type == TokenType.ELSE:
                return True
            if token.type in (TokenType.EOL, TokenType.REM):
                return False
            if token.type == TokenType.DATA:
                _, lexer.position = split_data(lexer.source, lexer.position)

    def execute_for(self, lexer: Lexer) -> Outcome:
        token = lexer.next_token()
        if token.type != TokenType.VARIABLE or is_string_name(token.value):
            self.error(lexer, "FOR requires a numeric variable", token)
        name = token.value

        self.expect(lexer, TokenType.EQUALS, "Expected = in FOR")
        initial = self.evaluator.expression(lexer)
        self.expect(lexer, TokenType.TO, "Expected TO")
        limit = self.evaluator.expression(lexer)
        step = 1.0
        if lexer.peek_token().type == TokenType.STEP:
            lexer.next_token()
            step = self.evaluator.expression(lexer)

        stack = self.ctx.for_stack
        # Re-entering a loop on the same variable drops it and anything inside it
        existing = stack.find(lambda frame: frame.variable == name)
        depth = existing if existing >= 0 else len(stack)
        if depth >= stack.capacity:
            raise BasicError(ErrorCode.STACK_OVERFLOW, "FOR loop stack overflow")

        var = self.ctx.variables.get_or_create_numeric(name)
        var.value = initial
        if existing >= 0:
            stack.unwind(existing)
        stack.push(ForFrame(name, limit, step, self.ctx.current_line, lexer.position, self.branch_depth > 0))
        logger.debug(f"FOR {name} = {initial} TO {limit} STEP {step}")
        return CONTINUE

    def execute_next(self, lexer: Lexer) -> Outcome:
        while True:
            name = None
            token = lexer.peek_token()
            if token.type == TokenType.VARIABLE:
                lexer.next_token()
                name = token.value

            frame = self.ctx.for_stack.top()
            if frame is None:
                raise BasicError(ErrorCode.NEXT_WITHOUT_FOR)
            if name is not None and name != frame.variable:
                raise BasicError(ErrorCode.NEXT_WITHOUT_FOR, f"NEXT {name} does not match FOR {frame.variable}")

            var = self.ctx.variables.get_or_create_numeric(frame.variable)
            var.value += frame.step
            if frame.step >= 0:
                looping = var.value <= frame.limit
            else:
                looping = var.value >= frame.limit

            if looping:
                logger.debug(f"NEXT {frame.variable}: continue, {frame.variable} = {var.value}")
                return JumpTo(frame.line_number, frame.resume_offset, frame.in_branch)

            self.ctx.for_stack.pop()
            logger.debug(f"NEXT {frame.variable}: loop finished")

            if name is None or lexer.peek_token().type != TokenType.COMMA:
                return CONTINUE
            lexer.next_token()

    def line_number(self, lexer: Lexer) -> int:
        return to_line_number(self.evaluator.expression(lexer))

    def jump(self, lexer: Lexer, target: int) -> Outcome:
        if self.ctx.program.find(target) is None:
            raise BasicError(ErrorCode.LINE_NOT_FOUND, f"Line {target} not found")
        logger.debug(f"jump from line {self.ctx.current_line} to {target}")
        return JumpTo(target, 0)

    def execute_goto(self, lexer: Lexer) -> Outcome:
        return self.jump(lexer, self.line_number(lexer))

    def execute_gosub(self, lexer: Lexer) -> Outcome:
        target = self.line_number(lexer)
        outcome = self.jump(lexer, target)
        self.ctx.gosub_stack.push(GosubFrame(self.ctx.current_line, lexer.position, self.branch_depth > 0))
        logger.debug(f"GOSUB {target}, depth {len(self.ctx.gosub_stack)}")
        return outcome

    def execute_return(self, lexer: Lexer) -> Outcome:
        if not self.ctx.gosub_stack:
            raise BasicError(ErrorCode.RETURN_WITHOUT_GOSUB)
        frame = self.ctx.gosub_stack.pop()
        logger.debug(f"RETURN to line {frame.return_line_number}")
        return JumpTo(frame.return_line_number, frame.resume_offset, frame.in_branch)

    # data and arrays

    def execute_read(self, lexer: Lexer) -> Outcome:
        while True:
            target = self.parse_target(lexer)
            item = self.ctx.next_data()
            if is_string_name(target[0]):
                value = item.text
            elif item.is_numeric:
                value = item.number
            else:
                raise BasicError(ErrorCode.TYPE_MISMATCH, f"Expected numeric DATA for {target[0]}, got {item.text!r}")
            self.assign(target, value)
            logger.debug(f"READ {target[0]} = {value!r}")

            if lexer.peek_token().type != TokenType.COMMA:
                return CONTINUE
            lexer.next_token()

    def execute_dim(self, lexer: Lexer) -> Outcome:
        while True:
            token = lexer.next_token()
            if token.type not in (TokenType.VARIABLE, TokenType.FUNCTION):
                self.error(lexer, "Expected array name", token)
            if lexer.peek_token().type != TokenType.LPAREN:
                self.error(lexer, "Expected opening parenthesis")
            dims = self.evaluator.subscripts(lexer)
            self.ctx.variables.create_array(token.value, dims)

            if lexer.peek_token().type != TokenType.COMMA:
                return CONTINUE
            lexer.next_token()

    # helpers

    def expect(self, lexer: Lexer, type: TokenType, message: str) -> Token:
        return self.evaluator.expect(lexer, type, message)

    def error(self, lexer: Lexer, message: str, token: Optional[Token] = None):
        column = token.column if token is not None else lexer.position
        raise BasicError(ErrorCode.SYNTAX, message).locate(lexer.source, column)


__all__ = [
    "Executor", "Outcome", "Continue", "JumpTo", "Halt", "Fail", "CONTINUE", "HALT",
]
