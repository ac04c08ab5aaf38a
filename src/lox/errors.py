from __future__ import annotations

import sys
from typing import TextIO

from termcolor import colored


class LoxError(Exception):
    """Base class of every error raised while scanning, parsing or running Lox code."""

    def __init__(self, message: str, line: int):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self):
        return f"{self.message} [line {self.line}]"


class LexError(LoxError):
    pass


class ParseError(LoxError):
    def __init__(self, token, message: str = ""):
        super().__init__(message or f"unexpected {token.kind.name} '{token.lexeme}'", token.line)
        self.token = token


class LoxRuntimeError(LoxError):
    def __init__(self, message: str, line: int, token=None):
        super().__init__(message, line)
        self.token = token


class ErrorReporter:
    """Writes diagnostics to stderr and remembers whether anything went wrong."""

    ERROR = "red"

    def __init__(self, stream: TextIO = None):
        self.stream = sys.stderr if stream is None else stream
        self.had_error = False

    def report(self, error: LoxError, path: str = None):
        location = f"{path}:{error.line}" if path else f"line {error.line}"
        msg = colored(f"{location}: ", attrs=["bold"])
        msg += colored("error: ", self.ERROR, attrs=["bold"])
        msg += f"{type(error).__name__}: {error.message}"
        print(msg, file=self.stream)
        self.had_error = True

    def report_all(self, errors, path: str = None):
        for error in errors:
            self.report(error, path)

    def unreadable(self, path: str, exc: OSError):
        msg = colored(f"{path}: ", attrs=["bold"])
        msg += colored("error: ", self.ERROR, attrs=["bold"])
        msg += f"cannot read script: {exc.strerror or exc}"
        print(msg, file=self.stream)
        self.had_error = True

    def internal(self, exc: Exception):
        msg = colored("[internal] ", self.ERROR, attrs=["bold"])
        msg += colored("error: ", self.ERROR, attrs=["bold"])
        msg += f"'{type(exc).__name__}: {exc}'"
        print(msg, file=self.stream)
        self.had_error = True

    def reset(self):
        self.had_error = False
