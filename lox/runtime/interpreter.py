"""Tree-walking evaluator for Lox.

Runtime values are plain Python objects, and every operation discriminates on them in this order:

    None            nil
    bool            true/false (checked before numbers: bool is an int subclass in Python, though never a float)
    float           numbers; Lox has no integer type
    str             strings
    LoxCallable     functions

Statements execute to an outcome rather than raising for control flow: execute returns None when a statement
completes normally, or a ReturnSignal when a return statement ran. Blocks, loops and ifs hand the signal straight back
to their caller, and Function.call is the one place that consumes it. Runtime errors are LoxRuntimeErrors, caught only
by interpret.
"""

import math
import sys
from dataclasses import dataclass

from lox.grammar.ast import (Assign, Binary, Block, Call, ExpressionStmt, FuncStmt, Grouping, IfStmt, Literal, Logical,
                             PrintStmt, ReturnStmt, Unary, Variable, VarStmt, WhileStmt)
from lox.grammar.tokens import Token, TokenKind
from lox.lang.error import LoxError, LoxRuntimeError
from lox.runtime.callable import Function, LoxCallable, NativeFunction
from lox.runtime.environment import Environment


@dataclass(frozen=True)
class ReturnSignal:
    """Outcome of executing a return statement. keyword locates a return that escapes to the top level."""
    keyword: Token
    value: object = None


def is_truthy(value):
    """nil and false are falsy, everything else (including 0 and "") is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """Values are equal only if they are of the same kind and have equal values. Never raises."""
    if left is None or right is None:
        return left is None and right is None

    for kind in (bool, float, str):
        if isinstance(left, kind) or isinstance(right, kind):
            return isinstance(left, kind) and isinstance(right, kind) and left == right

    return left is right


def stringify(value):
    """Text form of a value, as printed and as used when a number is concatenated to a string."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)  # floats render as Python does: 2.0, 0.5, 1e+16, inf


class Interpreter:
    """Executes statements against a global environment that persists across calls to interpret."""

    def __init__(self, error_handler, out=None):
        self.error_handler = error_handler
        self.out = out if out is not None else sys.stdout

        self.globals = Environment()
        self.environment = self.globals  # innermost scope of the code currently running

    def define_native(self, name, arity, function):
        """Registers a Python function as a global Lox function."""
        self.globals.define(name, NativeFunction(name, arity, function))

    def interpret(self, statements):
        """Runs statements in order. The first runtime error is reported and the rest of statements is skipped."""
        try:
            for statement in statements:
                signal = self.execute(statement)
                if signal is not None:
                    raise LoxRuntimeError(signal.keyword, "Can't return from top-level code.")

        except LoxRuntimeError as error:
            self.error_handler.runtime_error(error)
        except RecursionError:  # deep expression nesting outside of any call
            self.error_handler.throw(LoxError("Expression nesting too deep."))

    # ---------------------------------------- statements ----------------------------------------

    def execute(self, stmt):
        """Executes stmt. Returns a ReturnSignal if a return statement ran, else None."""
        if isinstance(stmt, ExpressionStmt):
            self.evaluate(stmt.expression)

        elif isinstance(stmt, PrintStmt):
            value = self.evaluate(stmt.expression)
            if value is not None:  # nil prints nothing
                print(stringify(value), file=self.out)

        elif isinstance(stmt, VarStmt):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)

        elif isinstance(stmt, Block):
            return self.execute_block(stmt.statements, Environment(self.environment))

        elif isinstance(stmt, IfStmt):
            if is_truthy(self.evaluate(stmt.condition)):
                return self.execute(stmt.then_branch)
            elif stmt.else_branch is not None:
                return self.execute(stmt.else_branch)

        elif isinstance(stmt, WhileStmt):
            while is_truthy(self.evaluate(stmt.condition)):
                signal = self.execute(stmt.body)
                if signal is not None:
                    return signal

        elif isinstance(stmt, FuncStmt):
            self.environment.define(stmt.name.lexeme, Function(stmt))

        elif isinstance(stmt, ReturnStmt):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return ReturnSignal(stmt.keyword, value)

        else:
            raise LoxError(f"cannot execute '{type(stmt).__name__}'", internal=True)

        return None

    def execute_block(self, statements, environment):
        """Executes statements inside environment, then restores the current environment however the block exits."""
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                signal = self.execute(statement)
                if signal is not None:
                    return signal
        finally:
            self.environment = previous

        return None

    # ---------------------------------------- expressions ----------------------------------------

    def evaluate(self, expr):
        if isinstance(expr, Literal):
            return expr.value

        elif isinstance(expr, Grouping):
            return self.evaluate(expr.expression)

        elif isinstance(expr, Unary):
            return self._unary(expr)

        elif isinstance(expr, Binary):
            return self._binary(expr)

        elif isinstance(expr, Logical):
            left = self.evaluate(expr.left)
            if expr.operator.kind is TokenKind.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)

        elif isinstance(expr, Variable):
            return self.environment.get(expr.name)

        elif isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            self.environment.assign(expr.name, value)
            return value

        elif isinstance(expr, Call):
            return self._call(expr)

        raise LoxError(f"cannot evaluate '{type(expr).__name__}'", internal=True)

    def _unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.kind is TokenKind.BANG:
            return not is_truthy(right)

        if expr.operator.kind is TokenKind.MINUS:
            if not isinstance(right, float):
                raise LoxRuntimeError(expr.operator, "Operand must be a number.")
            return -right

        raise LoxError(f"unknown unary operator '{expr.operator.lexeme}'", internal=True)

    def _binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        kind = expr.operator.kind

        if kind is TokenKind.EQUAL_EQUAL:
            return is_equal(left, right)
        if kind is TokenKind.BANG_EQUAL:
            return not is_equal(left, right)

        if kind is TokenKind.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            if isinstance(left, float) and isinstance(right, str):
                return stringify(left) + right
            if isinstance(left, str) and isinstance(right, float):
                return left + stringify(right)
            raise LoxRuntimeError(expr.operator, "Operands must be two numbers or two strings.")

        if not (isinstance(left, float) and isinstance(right, float)):
            raise LoxRuntimeError(expr.operator, "Operands must be numbers.")

        if kind is TokenKind.MINUS:
            return left - right
        if kind is TokenKind.STAR:
            return left * right
        if kind is TokenKind.SLASH:
            return self._divide(left, right)
        if kind is TokenKind.GREATER:
            return left > right
        if kind is TokenKind.GREATER_EQUAL:
            return left >= right
        if kind is TokenKind.LESS:
            return left < right
        if kind is TokenKind.LESS_EQUAL:
            return left <= right

        raise LoxError(f"unknown binary operator '{expr.operator.lexeme}'", internal=True)

    @staticmethod
    def _divide(left, right):
        """IEEE-754 division: Python raises on division by zero, Lox yields inf or nan."""
        try:
            return left / right
        except ZeroDivisionError:
            if left == 0 or math.isnan(left):
                return math.nan
            return math.copysign(math.inf, left) * math.copysign(1.0, right)

    def _call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")

        if len(arguments) != callee.arity():
            raise LoxRuntimeError(expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None
