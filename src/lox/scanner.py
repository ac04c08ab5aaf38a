from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any

from lox.errors import LexError

DIGITS = "0123456789"
LETTERS = "abcdefghijklmnopqrstuvwxyz"
WHITESPACE = " \r\t"


class TokenKind(str, Enum):
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    LEFT_BRACE = "{"
    RIGHT_BRACE = "}"
    COMMA = ","
    DOT = "."
    MINUS = "-"
    PLUS = "+"
    SEMICOLON = ";"
    SLASH = "/"
    STAR = "*"

    BANG = "!"
    BANG_EQUAL = "!="
    EQUAL = "="
    EQUAL_EQUAL = "=="
    GREATER = ">"
    GREATER_EQUAL = ">="
    LESS = "<"
    LESS_EQUAL = "<="

    IDENTIFIER = "identifier"
    STRING = "string"
    NUMBER = "number"

    AND = "and"
    CLASS = "class"
    ELSE = "else"
    FALSE = "false"
    FOR = "for"
    FUN = "fun"
    IF = "if"
    NIL = "nil"
    OR = "or"
    PRINT = "print"
    RETURN = "return"
    SUPER = "super"
    THIS = "this"
    TRUE = "true"
    VAR = "var"
    WHILE = "while"

    EOF = "eof"


SINGLE_CHAR_TOKENS = {
    k.value: k
    for k in (
        TokenKind.LEFT_PAREN,
        TokenKind.RIGHT_PAREN,
        TokenKind.LEFT_BRACE,
        TokenKind.RIGHT_BRACE,
        TokenKind.COMMA,
        TokenKind.DOT,
        TokenKind.MINUS,
        TokenKind.PLUS,
        TokenKind.SEMICOLON,
        TokenKind.STAR,
    )
}

# a comparison operator, optionally followed by "="
COMPARISONS = {
    "!": (TokenKind.BANG, TokenKind.BANG_EQUAL),
    "=": (TokenKind.EQUAL, TokenKind.EQUAL_EQUAL),
    "<": (TokenKind.LESS, TokenKind.LESS_EQUAL),
    ">": (TokenKind.GREATER, TokenKind.GREATER_EQUAL),
}

KEYWORDS = {
    k.value: k
    for k in (
        TokenKind.AND,
        TokenKind.CLASS,
        TokenKind.ELSE,
        TokenKind.FALSE,
        TokenKind.FOR,
        TokenKind.FUN,
        TokenKind.IF,
        TokenKind.NIL,
        TokenKind.OR,
        TokenKind.PRINT,
        TokenKind.RETURN,
        TokenKind.SUPER,
        TokenKind.THIS,
        TokenKind.TRUE,
        TokenKind.VAR,
        TokenKind.WHILE,
    )
}


@dataclasses.dataclass(frozen=True)
class Token:
    kind: TokenKind
    lexeme: str
    literal: Any = None
    line: int = 1

    def __str__(self):
        if self.literal is None:
            return f"{self.kind.name} {self.lexeme}"
        return f"{self.kind.name} {self.lexeme} {self.literal}"


class UnexpectedCharacter(LexError):
    def __init__(self, character: str, line: int):
        super().__init__(f"unexpected character '{character}'", line)
        self.character = character


class UnterminatedString(LexError):
    def __init__(self, line: int):
        super().__init__("unterminated string", line)


class ScanningFailed(ExceptionGroup):
    """All lexical errors found in one source text."""

    def derive(self, excs):
        return ScanningFailed(self.message, excs)


def tokenize(src: str) -> list[Token]:
    return Scanner(src).scan_tokens()


def is_digit(ch: str) -> bool:
    return ch != "" and ch in DIGITS


def is_alpha(ch: str) -> bool:
    return ch != "" and (ch in LETTERS or ch in LETTERS.upper() or ch == "_")


def is_alphanumeric(ch: str) -> bool:
    return is_alpha(ch) or is_digit(ch)


class Scanner:
    """Single pass scanner with one character of lookahead.

    Errors do not stop the scan. They are collected and raised together
    once the whole source has been consumed.
    """

    def __init__(self, src: str):
        self.src = src
        self.start = 0
        self.current = 0
        self.line = 1
        self.tokens: list[Token] = []

    def scan_tokens(self) -> list[Token]:
        errors = []
        while not self.is_at_end():
            self.start = self.current
            try:
                self.scan_token()
            except LexError as e:
                errors.append(e)

        if errors:
            raise ScanningFailed(f"{len(errors)} lexical error(s)", errors)

        self.tokens.append(Token(TokenKind.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        ch = self.advance()

        if ch in SINGLE_CHAR_TOKENS:
            self.add_token(SINGLE_CHAR_TOKENS[ch])
        elif ch in COMPARISONS:
            single, double = COMPARISONS[ch]
            self.add_token(double if self.match("=") else single)
        elif ch == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenKind.SLASH)
        elif ch in WHITESPACE:
            pass
        elif ch == "\n":
            self.line += 1
        elif ch == '"':
            self.string()
        elif is_digit(ch):
            self.number()
        elif is_alpha(ch):
            self.identifier()
        else:
            raise UnexpectedCharacter(ch, self.line)

    def string(self):
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        if self.is_at_end():
            raise UnterminatedString(self.line)

        # the closing quote
        self.advance()
        self.add_token(TokenKind.STRING, self.src[self.start + 1 : self.current - 1])

    def number(self):
        while is_digit(self.peek()):
            self.advance()

        if self.peek() == "." and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenKind.NUMBER, float(self.src[self.start : self.current]))

    def identifier(self):
        while is_alphanumeric(self.peek()):
            self.advance()
        text = self.src[self.start : self.current]
        self.add_token(KEYWORDS.get(text, TokenKind.IDENTIFIER))

    def add_token(self, kind: TokenKind, literal: Any = None):
        lexeme = self.src[self.start : self.current]
        self.tokens.append(Token(kind, lexeme, literal, self.line))

    def is_at_end(self) -> bool:
        return self.current >= len(self.src)

    def advance(self) -> str:
        ch = self.src[self.current]
        self.current += 1
        return ch

    def match(self, expected: str) -> bool:
        if self.is_at_end() or self.src[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self) -> str:
        if self.is_at_end():
            return ""
        return self.src[self.current]

    def peek_next(self) -> str:
        if self.current + 1 >= len(self.src):
            return ""
        return self.src[self.current + 1]
