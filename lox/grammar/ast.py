"""Syntax tree for Lox.

Two closed sets of node variants, expressions and statements. Nodes are frozen dataclasses whose child sequences are
tuples, so a tree cannot be modified once the parser has built it. There is no accept/visit protocol: consumers (the
Interpreter and the AstPrinter) dispatch on the node's type.

Tokens are kept on the nodes that can fail at runtime (operators, names, call parens, return keywords) so that errors
can report a line.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from lox.grammar.tokens import Token


class Expr:
    """Superclass of all expression nodes."""


class Stmt:
    """Superclass of all statement nodes."""


@dataclass(frozen=True)
class Literal(Expr):
    value: object


@dataclass(frozen=True)
class Grouping(Expr):
    expression: Expr


@dataclass(frozen=True)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Logical(Expr):
    """Short-circuiting "and"/"or". Kept apart from Binary because the right operand may not be evaluated."""
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Variable(Expr):
    name: Token


@dataclass(frozen=True)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used for error reporting
    arguments: Tuple[Expr, ...]


@dataclass(frozen=True)
class ExpressionStmt(Stmt):
    expression: Expr


@dataclass(frozen=True)
class PrintStmt(Stmt):
    expression: Expr


@dataclass(frozen=True)
class VarStmt(Stmt):
    name: Token
    initializer: Optional[Expr] = None


@dataclass(frozen=True)
class Block(Stmt):
    statements: Tuple[Stmt, ...]


@dataclass(frozen=True)
class IfStmt(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt] = None


@dataclass(frozen=True)
class WhileStmt(Stmt):
    condition: Expr
    body: Stmt


@dataclass(frozen=True)
class FuncStmt(Stmt):
    name: Token
    params: Tuple[Token, ...]
    body: Tuple[Stmt, ...]


@dataclass(frozen=True)
class ReturnStmt(Stmt):
    keyword: Token
    value: Optional[Expr] = None
