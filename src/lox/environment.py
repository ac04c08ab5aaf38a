from __future__ import annotations

import collections.abc
from typing import Any, Iterator, Optional

from lox.errors import LoxRuntimeError
from lox.scanner import Token


class UndefinedVariable(LoxRuntimeError):
    def __init__(self, name: Token):
        super().__init__(f"undefined variable '{name.lexeme}'", name.line, name)


class DuplicateVariableName(LoxRuntimeError):
    def __init__(self, name: str, line: int = 0):
        super().__init__(f"variable '{name}' is already defined in this scope", line)


class Environment(collections.abc.Mapping[str, Any]):
    """One scope level. Lookups fall through to the enclosing scope.

    Several environments may share the same parent, e.g. when closures
    capture the scope they were defined in.
    """

    def __init__(self, enclosing: Optional[Environment] = None):
        self.values: dict[str, Any] = {}
        self.enclosing = enclosing

    def define(self, name: str, value: Any, line: int = 0):
        if name in self.values:
            raise DuplicateVariableName(name, line)
        self.values[name] = value

    def lookup(self, name: Token) -> Any:
        try:
            return self[name.lexeme]
        except KeyError:
            raise UndefinedVariable(name) from None

    def assign(self, name: Token, value: Any):
        env = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise UndefinedVariable(name)

    def __getitem__(self, item: str) -> Any:
        env = self
        while env is not None:
            if item in env.values:
                return env.values[item]
            env = env.enclosing
        raise KeyError(item)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __iter__(self) -> Iterator[str]:
        seen = set()
        env = self
        while env is not None:
            for name in env.values:
                if name not in seen:
                    seen.add(name)
                    yield name
            env = env.enclosing
