from __future__ import annotations

import abc
import dataclasses
import math
from typing import Any, Optional, TYPE_CHECKING

from lox import abstract_syntax as ast
from lox.environment import Environment
from lox.errors import LoxRuntimeError
from lox.scanner import Token

if TYPE_CHECKING:
    from lox.interpreter import Interpreter


class Uninitialized:
    """Value of a variable declared without initializer"""

    def __repr__(self):
        return "nil"


UNINITIALIZED = Uninitialized()


class UndefinedProperty(LoxRuntimeError):
    def __init__(self, name: Token):
        super().__init__(f"undefined property '{name.lexeme}'", name.line, name)


@dataclasses.dataclass
class Return(Exception):
    """Unwinds the stack from a `return` statement to the enclosing call"""

    value: Any


class LoxCallable(abc.ABC):
    @abc.abstractmethod
    def arity(self) -> int:
        pass

    @abc.abstractmethod
    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        pass


@dataclasses.dataclass(eq=False)
class Function(LoxCallable):
    declaration: ast.Function
    closure: Environment
    is_initializer: bool = False

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def bind(self, instance: Instance) -> Function:
        env = Environment(self.closure)
        env.define("this", instance)
        return Function(self.declaration, env, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        env = Environment(self.closure)
        for param, arg in zip(self.declaration.params, arguments):
            env.define(param.lexeme, arg, param.line)

        try:
            interpreter.execute_block(self.declaration.body, env)
        except Return as ret:
            if self.is_initializer:
                return self.closure["this"]
            return ret.value

        if self.is_initializer:
            return self.closure["this"]
        return None

    def __str__(self):
        return f"<fn {self.name}>"


@dataclasses.dataclass(eq=False)
class Class(LoxCallable):
    name: str
    methods: dict[str, Function]
    superclass: Optional[Class] = None

    def find_method(self, name: str) -> Optional[Function]:
        cls = self
        while cls is not None:
            if name in cls.methods:
                return cls.methods[name]
            cls = cls.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        instance = Instance(self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self):
        return self.name


@dataclasses.dataclass(eq=False)
class Instance:
    cls: Class
    fields: dict[str, Any] = dataclasses.field(default_factory=dict)

    def get(self, name: Token) -> Any:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.cls.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise UndefinedProperty(name)

    def set(self, name: Token, value: Any):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.cls.name} instance"


def is_truthy(value: Any) -> bool:
    # only `false` is falsy; nil, 0 and "" are all truthy
    return value is not False


def is_equal(a: Any, b: Any) -> bool:
    # an uninitialized variable holds nil
    if a is UNINITIALIZED:
        a = None
    if b is UNINITIALIZED:
        b = None
    if type(a) is not type(b):
        return False
    if type(a) is float and math.isnan(a):
        return math.isnan(b)
    return a == b


def stringify(value: Any) -> str:
    match value:
        case None:
            return "nil"
        case bool():
            return str(value)
        case float():
            return format_number(value)
        case _:
            return str(value)


MAX_PLAIN_INTEGER = 1e21


def format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < MAX_PLAIN_INTEGER:
        return f"{value:.0f}"
    return repr(value)
