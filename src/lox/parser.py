from __future__ import annotations

from typing import Callable, Iterable, Optional

from lox import abstract_syntax as ast
from lox.errors import ParseError
from lox.scanner import Token, TokenKind

MAX_ARGUMENTS = 255


class UnknownExpression(ParseError):
    pass


class InvalidAssignmentTarget(ParseError):
    def __init__(self, token: Token):
        super().__init__(token, "invalid assignment target")


class TooManyArguments(ParseError):
    def __init__(self, token: Token, kind: str):
        super().__init__(token, f"cannot have more than {MAX_ARGUMENTS} {kind}")


class MissingToken(ParseError):
    expected: str = ""

    def __init__(self, token: Token, message: str = ""):
        super().__init__(token, message or f"expected '{self.expected}'")


class MissingClosingParenthesis(MissingToken):
    expected = ")"


class MissingLeftParenthesis(MissingToken):
    expected = "("


class MissingSemicolon(MissingToken):
    expected = ";"


class MissingRightBrace(MissingToken):
    expected = "}"


class MissingLeftBrace(MissingToken):
    expected = "{"


class MissingVariableName(MissingToken):
    expected = "identifier"


class MissingDot(MissingToken):
    expected = "."


MISSING_TOKEN_ERRORS = {
    TokenKind.RIGHT_PAREN: MissingClosingParenthesis,
    TokenKind.LEFT_PAREN: MissingLeftParenthesis,
    TokenKind.SEMICOLON: MissingSemicolon,
    TokenKind.RIGHT_BRACE: MissingRightBrace,
    TokenKind.LEFT_BRACE: MissingLeftBrace,
    TokenKind.IDENTIFIER: MissingVariableName,
    TokenKind.DOT: MissingDot,
}


class TokenStream:
    def __init__(self, tokens: Iterable[Token]):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].kind != TokenKind.EOF:
            line = self.tokens[-1].line if self.tokens else 1
            self.tokens.append(Token(TokenKind.EOF, "", None, line))
        self.pos = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def get_next(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != TokenKind.EOF:
            self.pos += 1
        return token

    def at_end(self) -> bool:
        return self.peek().kind == TokenKind.EOF

    def check(self, kind: TokenKind) -> bool:
        return not self.at_end() and self.peek().kind == kind


def parse(tokens: Iterable[Token]) -> list[ast.Statement]:
    return parse_program(TokenStream(tokens))


def parse_expression(tokens: Iterable[Token]) -> ast.Expression:
    ts = TokenStream(tokens)
    expr = parse_expr(ts)
    if not ts.at_end():
        raise UnknownExpression(ts.peek())
    return expr


def parse_program(ts: TokenStream) -> list[ast.Statement]:
    statements = []
    while not ts.at_end():
        statements.append(parse_declaration(ts))
    return statements


def parse_declaration(ts: TokenStream) -> ast.Statement:
    match ts.peek():
        case Token(TokenKind.CLASS):
            ts.get_next()
            return parse_class_declaration(ts)
        case Token(TokenKind.FUN):
            ts.get_next()
            return parse_function(ts, "function")
        case Token(TokenKind.VAR):
            ts.get_next()
            return parse_var_declaration(ts)
        case _:
            return parse_statement(ts)


def parse_class_declaration(ts: TokenStream) -> ast.Class:
    name = expect_token(ts, TokenKind.IDENTIFIER, "expected class name")

    superclass = None
    if try_token(ts, TokenKind.LESS):
        superclass = ast.Variable(expect_token(ts, TokenKind.IDENTIFIER, "expected superclass name"))

    expect_token(ts, TokenKind.LEFT_BRACE, "expected '{' before class body")
    methods = []
    while not ts.check(TokenKind.RIGHT_BRACE) and not ts.at_end():
        methods.append(parse_function(ts, "method"))
    expect_token(ts, TokenKind.RIGHT_BRACE, "expected '}' after class body")

    return ast.Class(name, superclass, tuple(methods))


def parse_function(ts: TokenStream, kind: str) -> ast.Function:
    name = expect_token(ts, TokenKind.IDENTIFIER, f"expected {kind} name")
    expect_token(ts, TokenKind.LEFT_PAREN, f"expected '(' after {kind} name")

    params = []
    if not ts.check(TokenKind.RIGHT_PAREN):
        while True:
            if len(params) >= MAX_ARGUMENTS:
                raise TooManyArguments(ts.peek(), "parameters")
            params.append(expect_token(ts, TokenKind.IDENTIFIER, "expected parameter name"))
            if not try_token(ts, TokenKind.COMMA):
                break

    expect_token(ts, TokenKind.RIGHT_PAREN, "expected ')' after parameters")
    expect_token(ts, TokenKind.LEFT_BRACE, f"expected '{{' before {kind} body")
    body = parse_block(ts)
    return ast.Function(name, tuple(params), tuple(body))


def parse_var_declaration(ts: TokenStream) -> ast.Var:
    name = expect_token(ts, TokenKind.IDENTIFIER, "expected variable name")
    initializer = None
    if try_token(ts, TokenKind.EQUAL):
        initializer = parse_expr(ts)
    expect_token(ts, TokenKind.SEMICOLON, "expected ';' after variable declaration")
    return ast.Var(name, initializer)


def parse_statement(ts: TokenStream) -> ast.Statement:
    match ts.peek():
        case Token(TokenKind.FOR):
            ts.get_next()
            return parse_for(ts)
        case Token(TokenKind.IF):
            ts.get_next()
            return parse_if(ts)
        case Token(TokenKind.PRINT):
            ts.get_next()
            value = parse_expr(ts)
            expect_token(ts, TokenKind.SEMICOLON, "expected ';' after value")
            return ast.Print(value)
        case Token(TokenKind.RETURN) as keyword:
            ts.get_next()
            return parse_return(ts, keyword)
        case Token(TokenKind.WHILE):
            ts.get_next()
            return parse_while(ts)
        case Token(TokenKind.LEFT_BRACE):
            ts.get_next()
            return ast.Block(tuple(parse_block(ts)))
        case _:
            expr = parse_expr(ts)
            expect_token(ts, TokenKind.SEMICOLON, "expected ';' after expression")
            return ast.ExpressionStatement(expr)


def parse_for(ts: TokenStream) -> ast.Statement:
    """`for` has no runtime representation of its own; it is rewritten
    into a block holding the initializer and a while loop"""
    expect_token(ts, TokenKind.LEFT_PAREN, "expected '(' after 'for'")

    match ts.peek():
        case Token(TokenKind.SEMICOLON):
            ts.get_next()
            initializer = None
        case Token(TokenKind.VAR):
            ts.get_next()
            initializer = parse_var_declaration(ts)
        case _:
            expr = parse_expr(ts)
            expect_token(ts, TokenKind.SEMICOLON, "expected ';' after loop initializer")
            initializer = ast.ExpressionStatement(expr)

    condition = None
    if not ts.check(TokenKind.SEMICOLON):
        condition = parse_expr(ts)
    expect_token(ts, TokenKind.SEMICOLON, "expected ';' after loop condition")

    increment = None
    if not ts.check(TokenKind.RIGHT_PAREN):
        increment = parse_expr(ts)
    expect_token(ts, TokenKind.RIGHT_PAREN, "expected ')' after for clauses")

    body = parse_statement(ts)

    if increment is not None:
        body = ast.Block((body, ast.ExpressionStatement(increment)))
    if condition is None:
        condition = ast.Literal(True)
    body = ast.While(condition, body)
    if initializer is not None:
        body = ast.Block((initializer, body))
    return body


def parse_if(ts: TokenStream) -> ast.If:
    expect_token(ts, TokenKind.LEFT_PAREN, "expected '(' after 'if'")
    condition = parse_expr(ts)
    expect_token(ts, TokenKind.RIGHT_PAREN, "expected ')' after if condition")

    then_branch = parse_statement(ts)
    else_branch = None
    if try_token(ts, TokenKind.ELSE):
        else_branch = parse_statement(ts)
    return ast.If(condition, then_branch, else_branch)


def parse_return(ts: TokenStream, keyword: Token) -> ast.Return:
    value = None
    if not ts.check(TokenKind.SEMICOLON):
        value = parse_expr(ts)
    expect_token(ts, TokenKind.SEMICOLON, "expected ';' after return value")
    return ast.Return(keyword, value)


def parse_while(ts: TokenStream) -> ast.While:
    expect_token(ts, TokenKind.LEFT_PAREN, "expected '(' after 'while'")
    condition = parse_expr(ts)
    expect_token(ts, TokenKind.RIGHT_PAREN, "expected ')' after while condition")
    return ast.While(condition, parse_statement(ts))


def parse_block(ts: TokenStream) -> list[ast.Statement]:
    """parse the statements of a block whose opening brace has already been consumed"""
    statements = []
    while not ts.check(TokenKind.RIGHT_BRACE) and not ts.at_end():
        statements.append(parse_declaration(ts))
    expect_token(ts, TokenKind.RIGHT_BRACE, "expected '}' after block")
    return statements


def parse_expr(ts: TokenStream) -> ast.Expression:
    return parse_assignment(ts)


def parse_assignment(ts: TokenStream) -> ast.Expression:
    expr = parse_or(ts)

    equals = try_token(ts, TokenKind.EQUAL)
    if not equals:
        return expr

    value = parse_assignment(ts)
    match expr:
        case ast.Variable(name):
            return ast.Assign(name, value)
        case ast.Get(obj, name):
            return ast.Set(obj, name, value)
        case _:
            raise InvalidAssignmentTarget(equals)


def parse_or(ts: TokenStream) -> ast.Expression:
    return parse_left_associative(ts, parse_and, (TokenKind.OR,), ast.Logical)


def parse_and(ts: TokenStream) -> ast.Expression:
    return parse_left_associative(ts, parse_equality, (TokenKind.AND,), ast.Logical)


def parse_equality(ts: TokenStream) -> ast.Expression:
    return parse_left_associative(
        ts, parse_comparison, (TokenKind.EQUAL_EQUAL, TokenKind.BANG_EQUAL)
    )


def parse_comparison(ts: TokenStream) -> ast.Expression:
    return parse_left_associative(
        ts,
        parse_term,
        (TokenKind.GREATER, TokenKind.GREATER_EQUAL, TokenKind.LESS, TokenKind.LESS_EQUAL),
    )


def parse_term(ts: TokenStream) -> ast.Expression:
    return parse_left_associative(ts, parse_factor, (TokenKind.PLUS, TokenKind.MINUS))


def parse_factor(ts: TokenStream) -> ast.Expression:
    return parse_left_associative(ts, parse_unary, (TokenKind.SLASH, TokenKind.STAR))


def parse_left_associative(
    ts: TokenStream,
    operand: Callable[[TokenStream], ast.Expression],
    operators: tuple[TokenKind, ...],
    node=ast.Binary,
) -> ast.Expression:
    expr = operand(ts)
    while op := try_token(ts, *operators):
        expr = node(expr, op, operand(ts))
    return expr


def parse_unary(ts: TokenStream) -> ast.Expression:
    if op := try_token(ts, TokenKind.BANG, TokenKind.MINUS):
        return ast.Unary(op, parse_unary(ts))
    return parse_call(ts)


def parse_call(ts: TokenStream) -> ast.Expression:
    expr = parse_primary(ts)
    while True:
        match ts.peek():
            case Token(TokenKind.LEFT_PAREN):
                ts.get_next()
                expr = finish_call(ts, expr)
            case Token(TokenKind.DOT):
                ts.get_next()
                name = expect_token(ts, TokenKind.IDENTIFIER, "expected property name after '.'")
                expr = ast.Get(expr, name)
            case _:
                return expr


def finish_call(ts: TokenStream, callee: ast.Expression) -> ast.Call:
    arguments = []
    if not ts.check(TokenKind.RIGHT_PAREN):
        while True:
            if len(arguments) >= MAX_ARGUMENTS:
                raise TooManyArguments(ts.peek(), "arguments")
            arguments.append(parse_expr(ts))
            if not try_token(ts, TokenKind.COMMA):
                break
    paren = expect_token(ts, TokenKind.RIGHT_PAREN, "expected ')' after arguments")
    return ast.Call(callee, paren, tuple(arguments))


def parse_primary(ts: TokenStream) -> ast.Expression:
    match ts.get_next():
        case Token(TokenKind.FALSE):
            return ast.Literal(False)
        case Token(TokenKind.TRUE):
            return ast.Literal(True)
        case Token(TokenKind.NIL):
            return ast.Literal(None)
        case Token(TokenKind.NUMBER | TokenKind.STRING, _, literal):
            return ast.Literal(literal)
        case Token(TokenKind.SUPER) as keyword:
            expect_token(ts, TokenKind.DOT, "expected '.' after 'super'")
            method = expect_token(ts, TokenKind.IDENTIFIER, "expected superclass method name")
            return ast.Super(keyword, method)
        case Token(TokenKind.THIS) as keyword:
            return ast.This(keyword)
        case Token(TokenKind.IDENTIFIER) as name:
            return ast.Variable(name)
        case Token(TokenKind.LEFT_PAREN):
            expr = parse_expr(ts)
            expect_token(ts, TokenKind.RIGHT_PAREN, "expected ')' after expression")
            return ast.Grouping(expr)
        case token:
            raise UnknownExpression(token, f"expected expression, got '{token.lexeme}'")


def expect_token(ts: TokenStream, expect: TokenKind, message: str = "") -> Token:
    if ts.check(expect):
        return ts.get_next()
    raise MISSING_TOKEN_ERRORS[expect](ts.peek(), message)


def try_token(ts: TokenStream, *expect: TokenKind) -> Optional[Token]:
    for kind in expect:
        if ts.check(kind):
            return ts.get_next()
    return None
