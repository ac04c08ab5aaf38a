from __future__ import annotations

import math
import sys
from typing import Any, Iterable, TextIO

from lox import abstract_syntax as ast
from lox.environment import Environment
from lox.errors import LoxRuntimeError
from lox.runtime import (
    UNINITIALIZED,
    Class,
    Function,
    Instance,
    LoxCallable,
    Return,
    UndefinedProperty,
    is_equal,
    is_truthy,
    stringify,
)
from lox.scanner import Token, TokenKind


class OperandMustBeANumber(LoxRuntimeError):
    def __init__(self, operator: Token):
        super().__init__(f"operand of '{operator.lexeme}' must be a number", operator.line, operator)


class OperandMustBeANumberOrString(LoxRuntimeError):
    def __init__(self, operator: Token):
        super().__init__(
            f"operands of '{operator.lexeme}' must be numbers or strings", operator.line, operator
        )


class FunctionCallIsNotSupportedHere(LoxRuntimeError):
    def __init__(self, paren: Token):
        super().__init__("can only call functions and classes", paren.line, paren)


class UnmatchedFunctionArguments(LoxRuntimeError):
    def __init__(self, paren: Token, expected: int, got: int):
        super().__init__(f"Expected {expected} arguments but got {got}.", paren.line, paren)


class OnlyInstancesCanHaveProperty(LoxRuntimeError):
    def __init__(self, name: Token):
        super().__init__(f"only instances have properties, cannot get '{name.lexeme}'", name.line, name)


class OnlyInstancesCanHaveFields(LoxRuntimeError):
    def __init__(self, name: Token):
        super().__init__(f"only instances have fields, cannot set '{name.lexeme}'", name.line, name)


class SuperClassMustBeAClass(LoxRuntimeError):
    def __init__(self, name: Token):
        super().__init__(f"superclass '{name.lexeme}' must be a class", name.line, name)


THIS = "this"
SUPER = "super"


class Interpreter:
    """Executes statement trees.

    `environment` always points at the innermost active scope. Blocks,
    calls and subclass bodies replace it and put the previous scope back
    when they are left, also when an error unwinds through them.
    """

    def __init__(self, output: TextIO = None):
        self.globals = Environment()
        self.environment = self.globals
        self.output = sys.stdout if output is None else output

    def interpret(self, statements: Iterable[ast.Statement]):
        try:
            for stmt in statements:
                self.execute(stmt)
        except Return:
            # a top-level `return` ends the program
            pass

    def execute_block(self, statements: Iterable[ast.Statement], env: Environment):
        previous = self.environment
        try:
            self.environment = env
            for stmt in statements:
                self.execute(stmt)
        finally:
            self.environment = previous

    def execute(self, stmt: ast.Statement):
        match stmt:
            case ast.ExpressionStatement(expr):
                self.evaluate(expr)
            case ast.Print(expr):
                print(stringify(self.evaluate(expr)), file=self.output)
            case ast.Var(name, initializer):
                value = UNINITIALIZED
                if initializer is not None:
                    value = self.evaluate(initializer)
                self.environment.define(name.lexeme, value, name.line)
            case ast.Block(statements):
                self.execute_block(statements, Environment(self.environment))
            case ast.If(condition, then_branch, else_branch):
                if is_truthy(self.evaluate(condition)):
                    self.execute(then_branch)
                elif else_branch is not None:
                    self.execute(else_branch)
            case ast.While(condition, body):
                while is_truthy(self.evaluate(condition)):
                    self.execute(body)
            case ast.Function(name):
                function = Function(stmt, self.environment)
                self.environment.define(name.lexeme, function, name.line)
            case ast.Return(_, value):
                raise Return(None if value is None else self.evaluate(value))
            case ast.Class():
                self.execute_class(stmt)
            case _:
                raise NotImplementedError(stmt)

    def execute_class(self, stmt: ast.Class):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, Class):
                raise SuperClassMustBeAClass(stmt.superclass.name)

        self.environment.define(stmt.name.lexeme, UNINITIALIZED, stmt.name.line)

        previous = self.environment
        try:
            if superclass is not None:
                self.environment = Environment(self.environment)
                self.environment.define(SUPER, superclass)

            methods = {
                method.name.lexeme: Function(
                    method, self.environment, is_initializer=method.name.lexeme == "init"
                )
                for method in stmt.methods
            }
        finally:
            self.environment = previous

        self.environment.assign(stmt.name, Class(stmt.name.lexeme, methods, superclass))

    def evaluate(self, expr: ast.Expression) -> Any:
        match expr:
            case ast.Literal(value):
                return value
            case ast.Grouping(inner):
                return self.evaluate(inner)
            case ast.Unary(op, right):
                return self.evaluate_unary(op, self.evaluate(right))
            case ast.Binary(left, op, right):
                lhs = self.evaluate(left)
                rhs = self.evaluate(right)
                return self.evaluate_binary(op, lhs, rhs)
            case ast.Logical(left, op, right):
                lhs = self.evaluate(left)
                if op.kind == TokenKind.OR:
                    if is_truthy(lhs):
                        return lhs
                elif not is_truthy(lhs):
                    return lhs
                return self.evaluate(right)
            case ast.Variable(name):
                return self.environment.lookup(name)
            case ast.Assign(name, value_expr):
                value = self.evaluate(value_expr)
                self.environment.assign(name, value)
                return value
            case ast.Call(callee, paren, arguments):
                return self.evaluate_call(callee, paren, arguments)
            case ast.Get(obj, name):
                instance = self.evaluate(obj)
                if not isinstance(instance, Instance):
                    raise OnlyInstancesCanHaveProperty(name)
                return instance.get(name)
            case ast.Set(obj, name, value_expr):
                instance = self.evaluate(obj)
                if not isinstance(instance, Instance):
                    raise OnlyInstancesCanHaveFields(name)
                value = self.evaluate(value_expr)
                instance.set(name, value)
                return value
            case ast.This(keyword):
                return self.environment.lookup(keyword)
            case ast.Super(keyword, method_name):
                superclass = self.environment.lookup(keyword)
                instance = self.environment[THIS]
                method = superclass.find_method(method_name.lexeme)
                if method is None:
                    raise UndefinedProperty(method_name)
                return method.bind(instance)
            case _:
                raise NotImplementedError(expr)

    def evaluate_call(self, callee: ast.Expression, paren: Token, arguments) -> Any:
        function = self.evaluate(callee)
        args = [self.evaluate(arg) for arg in arguments]

        if not isinstance(function, LoxCallable):
            raise FunctionCallIsNotSupportedHere(paren)
        if len(args) != function.arity():
            raise UnmatchedFunctionArguments(paren, function.arity(), len(args))

        return function.call(self, args)

    @staticmethod
    def evaluate_unary(op: Token, right: Any) -> Any:
        match op.kind:
            case TokenKind.BANG:
                return not is_truthy(right)
            case TokenKind.MINUS:
                check_number_operands(op, right)
                return -right
            case _:
                raise NotImplementedError(op)

    @staticmethod
    def evaluate_binary(op: Token, a: Any, b: Any) -> Any:
        match op.kind:
            case TokenKind.EQUAL_EQUAL:
                return is_equal(a, b)
            case TokenKind.BANG_EQUAL:
                return not is_equal(a, b)
            case TokenKind.PLUS:
                return add(op, a, b)

        check_number_operands(op, a, b)
        match op.kind:
            case TokenKind.MINUS:
                return a - b
            case TokenKind.STAR:
                return a * b
            case TokenKind.SLASH:
                return divide(a, b)
            case TokenKind.GREATER:
                return a > b
            case TokenKind.GREATER_EQUAL:
                return a >= b
            case TokenKind.LESS:
                return a < b
            case TokenKind.LESS_EQUAL:
                return a <= b
            case _:
                raise NotImplementedError(op)


def check_number_operands(op: Token, *operands: Any):
    for x in operands:
        if type(x) is not float:
            raise OperandMustBeANumber(op)


def add(op: Token, a: Any, b: Any) -> Any:
    match a, b:
        case float(), float():
            return a + b
        case str(), str():
            return a + b
        case float(), str():
            return stringify(a) + b
        case str(), float():
            return a + stringify(b)
        case _:
            raise OperandMustBeANumberOrString(op)


def divide(a: float, b: float) -> float:
    if b != 0.0:
        return a / b
    if a == 0.0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)
