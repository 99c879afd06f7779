from typing import List

from orionbasic.context import InterpreterContext
from orionbasic.errors import BasicError, ErrorCode
from orionbasic.functions import (
    NUMERIC_FUNCTIONS, STRING_ARG_FUNCTIONS, STRING_FUNCTIONS, make_rnd,
)
from orionbasic.lexer import Lexer
from orionbasic.tokens import ADDITIVE, MULTIPLICATIVE, RELATIONAL, Token, TokenType
from orionbasic.values import coerce_number, to_index


def compare(op: TokenType, left, right) -> float:
    if op == TokenType.EQUALS:
        result = left == right
    elif op == TokenType.NOT_EQUAL:
        result = left != right
    elif op == TokenType.LESS:
        result = left < right
    elif op == TokenType.LESS_EQUAL:
        result = left <= right
    elif op == TokenType.GREATER:
        result = left > right
    else:
        result = left >= right
    return 1.0 if result else 0.0


class Evaluator:
    """Recursive-descent evaluator for BASIC expressions.

    Grammar, all binary operators left-associative::

        expression := term ( ('+'|'-'|'='|'<'|'<='|'<>'|'>'|'>=') term )*
        term       := factor ( ('*'|'/') factor )*
        factor     := ['+'|'-'] ( NUMBER | '(' expression ')' | VARIABLE
                                | VARIABLE '(' subscripts ')' | FUNCTION '(' args ')' )

    Relational operators share the additive tier and yield 1.0 or 0.0.
    String operands are accepted wherever a factor is expected and are
    coerced to numbers, except that ``string relop string`` at the head
    of an expression compares the strings themselves.
    """

    def __init__(self, ctx: InterpreterContext):
        self.ctx = ctx
        self.rnd = make_rnd(ctx.rng)

    # numeric expressions

    def expression(self, lexer: Lexer) -> float:
        with self.ctx.nested():
            if self.starts_string(lexer):
                left = self.string_head(lexer)
            else:
                left = self.term(lexer)

            while True:
                op = lexer.peek_token()
                if op.type not in ADDITIVE:
                    return left
                lexer.next_token()
                right = self.term(lexer)
                if op.type == TokenType.PLUS:
                    left = left + right
                elif op.type == TokenType.MINUS:
                    left = left - right
                else:
                    left = compare(op.type, left, right)

    def string_head(self, lexer: Lexer) -> float:
        text = self.string_expression(lexer)
        op = lexer.peek_token()
        if op.type in RELATIONAL:
            saved = lexer.position
            lexer.next_token()
            if self.starts_string(lexer):
                return compare(op.type, text, self.string_expression(lexer))
            lexer.position = saved
        return self.term_rest(lexer, coerce_number(text))

    def term(self, lexer: Lexer) -> float:
        return self.term_rest(lexer, self.factor(lexer))

    def term_rest(self, lexer: Lexer, left: float) -> float:
        while True:
            op = lexer.peek_token()
            if op.type not in MULTIPLICATIVE:
                return left
            lexer.next_token()
            right = self.factor(lexer)
            if op.type == TokenType.MULTIPLY:
                left = left * right
            else:
                if right == 0:
                    raise BasicError(ErrorCode.DIVISION_BY_ZERO).locate(lexer.source, op.column)
                left = left / right

    def factor(self, lexer: Lexer) -> float:
        token = lexer.next_token()
        sign = 1.0
        if token.type in (TokenType.PLUS, TokenType.MINUS):
            if token.type == TokenType.MINUS:
                sign = -1.0
            token = lexer.next_token()

        if token.type == TokenType.NUMBER:
            return sign * token.value

        if token.type == TokenType.LPAREN:
            with self.ctx.nested():
                value = self.expression(lexer)
            self.expect(lexer, TokenType.RPAREN, "Missing closing parenthesis")
            return sign * value

        if token.type in (TokenType.VARIABLE, TokenType.FUNCTION):
            return sign * self.named_value(lexer, token)

        if token.type == TokenType.STRING:
            return sign * coerce_number(token.value)

        if token.type == TokenType.EOL:
            raise BasicError(ErrorCode.SYNTAX, "Missing operand").locate(lexer.source, token.column)
        raise BasicError(
            ErrorCode.SYNTAX, f"Expected number, variable, or expression, got {token.type.value}"
        ).locate(lexer.source, token.column)

    def named_value(self, lexer: Lexer, token: Token) -> float:
        name = token.value
        store = self.ctx.variables

        if token.type == TokenType.FUNCTION:
            if name in NUMERIC_FUNCTIONS or name == "RND":
                fn = self.rnd if name == "RND" else NUMERIC_FUNCTIONS[name]
                self.expect(lexer, TokenType.LPAREN, f"Expected ( after {name}")
                with self.ctx.nested():
                    argument = self.expression(lexer)
                self.expect(lexer, TokenType.RPAREN, "Expected closing parenthesis")
                return fn(argument)
            if name in STRING_ARG_FUNCTIONS:
                self.expect(lexer, TokenType.LPAREN, f"Expected ( after {name}")
                with self.ctx.nested():
                    argument = self.string_expression(lexer)
                self.expect(lexer, TokenType.RPAREN, "Expected closing parenthesis")
                return STRING_ARG_FUNCTIONS[name](argument)
            if name in STRING_FUNCTIONS:
                return coerce_number(self.call_string_function(lexer, name))
            if name not in store:
                raise BasicError(ErrorCode.SYNTAX, f"Unknown function {name}").locate(lexer.source, token.column)

        if lexer.peek_token().type == TokenType.LPAREN:
            value = store.read_element(name, self.subscripts(lexer))
            return coerce_number(value) if isinstance(value, str) else value
        return store.read_numeric(name)

    def subscripts(self, lexer: Lexer) -> List[int]:
        self.expect(lexer, TokenType.LPAREN, "Expected (")
        indices = []
        with self.ctx.nested():
            while True:
                indices.append(to_index(self.expression(lexer)))
                if lexer.peek_token().type != TokenType.COMMA:
                    break
                lexer.next_token()
        self.expect(lexer, TokenType.RPAREN, "Missing closing parenthesis")
        return indices

    # string expressions

    def starts_string(self, lexer: Lexer) -> bool:
        token = lexer.peek_token()
        return token.type == TokenType.STRING or token.is_string_name

    def string_expression(self, lexer: Lexer) -> str:
        with self.ctx.nested():
            value = self.string_term(lexer)
            while lexer.peek_token().type == TokenType.PLUS:
                saved = lexer.position
                lexer.next_token()
                if not self.starts_string(lexer):
                    lexer.position = saved
                    break
                value += self.string_term(lexer)
            return value

    def string_term(self, lexer: Lexer) -> str:
        token = lexer.next_token()
        if token.type == TokenType.STRING:
            return token.value
        if token.is_string_name:
            name = token.value
            if token.type == TokenType.FUNCTION and name in STRING_FUNCTIONS:
                return self.call_string_function(lexer, name)
            if lexer.peek_token().type == TokenType.LPAREN:
                value = self.ctx.variables.read_element(name, self.subscripts(lexer))
                if not isinstance(value, str):
                    raise BasicError(ErrorCode.TYPE_MISMATCH, f"{name} is not a string array")
                return value
            return self.ctx.variables.read_string(name)
        raise BasicError(ErrorCode.TYPE_MISMATCH, "Expected string expression").locate(lexer.source, token.column)

    def call_string_function(self, lexer: Lexer, name: str) -> str:
        fn, kinds = STRING_FUNCTIONS[name]
        self.expect(lexer, TokenType.LPAREN, f"Expected ( after {name}")
        args = []
        with self.ctx.nested():
            for i, kind in enumerate(kinds):
                optional = kind.endswith('?')
                if i > 0:
                    if lexer.peek_token().type != TokenType.COMMA:
                        if optional:
                            break
                        raise BasicError(ErrorCode.SYNTAX, f"{name} expects {len(kinds)} arguments")
                    lexer.next_token()
                if kind.startswith("str"):
                    args.append(self.string_expression(lexer))
                else:
                    args.append(self.expression(lexer))
        self.expect(lexer, TokenType.RPAREN, "Expected closing parenthesis")
        return fn(*args)

    def expect(self, lexer: Lexer, type: TokenType, message: str) -> Token:
        token = lexer.next_token()
        if token.type != type:
            raise BasicError(ErrorCode.SYNTAX, message).locate(lexer.source, token.column)
        return token


__all__ = ["Evaluator", "compare"]
