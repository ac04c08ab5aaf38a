from __future__ import annotations

import abc
import dataclasses
from typing import Any, Optional

from lox.scanner import Token


class AstNode(abc.ABC):
    pass


class Expression(AstNode):
    pass


class Statement(AstNode):
    pass


@dataclasses.dataclass(frozen=True)
class Literal(Expression):
    value: Any


@dataclasses.dataclass(frozen=True)
class Grouping(Expression):
    expression: Expression


@dataclasses.dataclass(frozen=True)
class Unary(Expression):
    operator: Token
    right: Expression


@dataclasses.dataclass(frozen=True)
class Binary(Expression):
    left: Expression
    operator: Token
    right: Expression


@dataclasses.dataclass(frozen=True)
class Logical(Expression):
    """Short-circuiting `and` / `or`"""

    left: Expression
    operator: Token
    right: Expression


@dataclasses.dataclass(frozen=True)
class Variable(Expression):
    name: Token


@dataclasses.dataclass(frozen=True)
class Assign(Expression):
    name: Token
    value: Expression


@dataclasses.dataclass(frozen=True)
class Call(Expression):
    callee: Expression
    paren: Token
    arguments: tuple[Expression, ...]


@dataclasses.dataclass(frozen=True)
class Get(Expression):
    object: Expression
    name: Token


@dataclasses.dataclass(frozen=True)
class Set(Expression):
    object: Expression
    name: Token
    value: Expression


@dataclasses.dataclass(frozen=True)
class This(Expression):
    keyword: Token


@dataclasses.dataclass(frozen=True)
class Super(Expression):
    keyword: Token
    method: Token


@dataclasses.dataclass(frozen=True)
class ExpressionStatement(Statement):
    expression: Expression


@dataclasses.dataclass(frozen=True)
class Print(Statement):
    expression: Expression


@dataclasses.dataclass(frozen=True)
class Var(Statement):
    name: Token
    initializer: Optional[Expression]


@dataclasses.dataclass(frozen=True)
class Block(Statement):
    statements: tuple[Statement, ...]


@dataclasses.dataclass(frozen=True)
class If(Statement):
    condition: Expression
    then_branch: Statement
    else_branch: Optional[Statement]


@dataclasses.dataclass(frozen=True)
class While(Statement):
    condition: Expression
    body: Statement


@dataclasses.dataclass(frozen=True)
class Function(Statement):
    name: Token
    params: tuple[Token, ...]
    body: tuple[Statement, ...]


@dataclasses.dataclass(frozen=True)
class Return(Statement):
    keyword: Token
    value: Optional[Expression]


@dataclasses.dataclass(frozen=True)
class Class(Statement):
    name: Token
    superclass: Optional[Variable]
    methods: tuple[Function, ...]
