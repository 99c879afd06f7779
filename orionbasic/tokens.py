from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet


class TokenType(Enum):
    # Special
    EOL = "EOL"

    # Literals and names
    NUMBER = "NUMBER"
    STRING = "STRING"
    VARIABLE = "VARIABLE"
    FUNCTION = "FUNCTION"

    # Keywords
    PRINT = "PRINT"
    INPUT = "INPUT"
    LET = "LET"
    IF = "IF"
    THEN = "THEN"
    ELSE = "ELSE"
    FOR = "FOR"
    TO = "TO"
    STEP = "STEP"
    NEXT = "NEXT"
    GOSUB = "GOSUB"
    RETURN = "RETURN"
    GOTO = "GOTO"
    READ = "READ"
    DATA = "DATA"
    RESTORE = "RESTORE"
    DIM = "DIM"
    END = "END"
    STOP = "STOP"
    REM = "REM"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"

    # Operators
    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    EQUALS = "="
    LESS = "<"
    LESS_EQUAL = "<="
    NOT_EQUAL = "<>"
    GREATER = ">"
    GREATER_EQUAL = ">="

    # Punctuation
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"


KEYWORDS: Dict[str, TokenType] = {
    name: TokenType[name]
    for name in (
        "PRINT", "INPUT", "LET", "IF", "THEN", "ELSE", "FOR", "TO", "STEP",
        "NEXT", "GOSUB", "RETURN", "GOTO", "READ", "DATA", "RESTORE", "DIM",
        "END", "STOP", "REM", "AND", "OR", "NOT",
    )
}

# Single characters that always stand alone; '<' and '>' need lookahead.
SYMBOLS: Dict[str, TokenType] = {
    '+': TokenType.PLUS, '-': TokenType.MINUS,
    '*': TokenType.MULTIPLY, '/': TokenType.DIVIDE,
    '=': TokenType.EQUALS,
    '(': TokenType.LPAREN, ')': TokenType.RPAREN,
    ',': TokenType.COMMA, ';': TokenType.SEMICOLON, ':': TokenType.COLON,
}

RELATIONAL: FrozenSet[TokenType] = frozenset({
    TokenType.EQUALS, TokenType.LESS, TokenType.LESS_EQUAL,
    TokenType.NOT_EQUAL, TokenType.GREATER, TokenType.GREATER_EQUAL,
})

ADDITIVE: FrozenSet[TokenType] = frozenset({TokenType.PLUS, TokenType.MINUS}) | RELATIONAL

MULTIPLICATIVE: FrozenSet[TokenType] = frozenset({TokenType.MULTIPLY, TokenType.DIVIDE})

# Tokens that end a statement inside a line.
STATEMENT_END: FrozenSet[TokenType] = frozenset({TokenType.EOL, TokenType.COLON, TokenType.ELSE})


@dataclass
class Token:
    type: TokenType
    value: Any
    column: int
    length: int

    @property
    def is_string_name(self) -> bool:
        """True for names that denote string values (``A$``, ``LEFT$``)."""
        return (self.type in (TokenType.VARIABLE, TokenType.FUNCTION)
                and isinstance(self.value, str) and self.value.endswith('$'))

    def __str__(self):
        if self.value is None:
            return f"{self.type.value} at {self.column}"
        return f"{self.type.value}({self.value!r}) at {self.column}"


__all__ = ["TokenType", "Token", "KEYWORDS", "SYMBOLS", "RELATIONAL",
           "ADDITIVE", "MULTIPLICATIVE", "STATEMENT_END"]
