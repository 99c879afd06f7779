from orionbasic.errors import BasicError, ErrorCode
from orionbasic.tokens import KEYWORDS, SYMBOLS, Token, TokenType


class Lexer:
    """Produces one token at a time from a line of BASIC text.

    The lexer owns a cursor (``position``) into ``source``; statement
    handlers save and restore it to look ahead or to rewind over a token
    they decided not to consume.
    """

    def __init__(self, source: str, position: int = 0, max_identifier_length: int = 31):
        self.source = source
        self.position = position
        self.max_identifier_length = max_identifier_length
        self.start = position

    def next_token(self) -> Token:
        self.skip_whitespace()
        self.start = self.position

        if self.is_at_end():
            return self.make_token(TokenType.EOL, None)

        char = self.peek()

        if is_digit(char) or (char == '.' and is_digit(self.peek_next())):
            return self.number()

        if char == '"':
            return self.string()

        if char == '<':
            self.advance()
            if self.peek() == '=':
                self.advance()
                return self.make_token(TokenType.LESS_EQUAL, '<=')
            if self.peek() == '>':
                self.advance()
                return self.make_token(TokenType.NOT_EQUAL, '<>')
            return self.make_token(TokenType.LESS, '<')

        if char == '>':
            self.advance()
            if self.peek() == '=':
                self.advance()
                return self.make_token(TokenType.GREATER_EQUAL, '>=')
            return self.make_token(TokenType.GREATER, '>')

        if char in SYMBOLS:
            self.advance()
            return self.make_token(SYMBOLS[char], char)

        if is_alpha(char):
            return self.identifier()

        self.error(f"Unexpected character: {char}")

    def peek_token(self) -> Token:
        saved = self.position
        try:
            return self.next_token()
        finally:
            self.position = saved

    def number(self) -> Token:
        while is_digit(self.peek()):
            self.advance()

        # Fractional part; "5." is a valid literal
        if self.peek() == '.':
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        value = float(self.source[self.start:self.position])
        return self.make_token(TokenType.NUMBER, value)

    def string(self) -> Token:
        self.advance()  # opening quote
        while self.peek() != '"' and not self.is_at_end():
            self.advance()

        if self.is_at_end():
            self.error("Unterminated string")

        self.advance()  # closing quote
        value = self.source[self.start + 1:self.position - 1]
        return self.make_token(TokenType.STRING, value)

    def identifier(self) -> Token:
        while is_alnum(self.peek()):
            self.advance()
        if self.peek() == '$':
            self.advance()

        text = self.source[self.start:self.position].upper()
        if len(text) > self.max_identifier_length:
            self.error(f"Identifier too long: {text[:self.max_identifier_length]}...")

        if text in KEYWORDS:
            return self.make_token(KEYWORDS[text], text)

        base = text.rstrip('$')
        if len(base) == 1:
            return self.make_token(TokenType.VARIABLE, text)
        if self.peek() == '(':
            return self.make_token(TokenType.FUNCTION, text)
        return self.make_token(TokenType.VARIABLE, text)

    def skip_whitespace(self):
        while self.peek() in (' ', '\t'):
            self.advance()

    def rest(self) -> str:
        """Raw text from the cursor to the end of the line."""
        return self.source[self.position:]

    def advance(self) -> str:
        char = self.source[self.position]
        self.position += 1
        return char

    def peek(self) -> str:
        if self.is_at_end():
            return '\0'
        return self.source[self.position]

    def peek_next(self) -> str:
        if self.position + 1 >= len(self.source):
            return '\0'
        return self.source[self.position + 1]

    def is_at_end(self) -> bool:
        return self.position >= len(self.source)

    def make_token(self, type: TokenType, value) -> Token:
        return Token(type, value, self.start, self.position - self.start)

    def error(self, message: str, column: int = None):
        if column is None:
            column = self.position
        raise BasicError(ErrorCode.SYNTAX, message, column=column, source=self.source)


def is_alpha(char: str) -> bool:
    return ('A' <= char <= 'Z') or ('a' <= char <= 'z')


def is_digit(char: str) -> bool:
    return '0' <= char <= '9'


def is_alnum(char: str) -> bool:
    return is_alpha(char) or is_digit(char)


def tokenize(source: str):
    """Lex a whole line into a list of tokens, EOL included."""
    lexer = Lexer(source)
    tokens = []
    while True:
        token = lexer.next_token()
        tokens.append(token)
        if token.type == TokenType.EOL:
            return tokens


__all__ = ["Lexer", "tokenize", "is_alpha", "is_digit", "is_alnum"]
