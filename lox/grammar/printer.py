"""Renders Lox syntax trees as parenthesized prefix expressions, one line per top-level statement. Used by the --ast
command-line option and handy when debugging the parser.

    1 + 2 * 3;                   =>  (; (+ 1.0 (* 2.0 3.0)))
    for (var i = 0; i < 3; i = i + 1) print i;
                                 =>  (block (var i 0.0) (while (< i 3.0) (block (print i) (; (= i (+ i 1.0))))))
"""

from lox.grammar.ast import (Assign, Binary, Block, Call, ExpressionStmt, FuncStmt, Grouping, IfStmt, Literal, Logical,
                             PrintStmt, ReturnStmt, Unary, Variable, VarStmt, WhileStmt)
from lox.lang.error import LoxError


class AstPrinter:

    def print(self, node):
        """Returns the text form of a statement or expression node."""
        if isinstance(node, Literal):
            return self.literal(node.value)
        if isinstance(node, Grouping):
            return self.parenthesize("group", node.expression)
        if isinstance(node, Unary):
            return self.parenthesize(node.operator.lexeme, node.right)
        if isinstance(node, (Binary, Logical)):
            return self.parenthesize(node.operator.lexeme, node.left, node.right)
        if isinstance(node, Variable):
            return node.name.lexeme
        if isinstance(node, Assign):
            return self.parenthesize("=", node.name.lexeme, node.value)
        if isinstance(node, Call):
            return self.parenthesize("call", node.callee, *node.arguments)

        if isinstance(node, ExpressionStmt):
            return self.parenthesize(";", node.expression)
        if isinstance(node, PrintStmt):
            return self.parenthesize("print", node.expression)
        if isinstance(node, VarStmt):
            if node.initializer is None:
                return self.parenthesize("var", node.name.lexeme)
            return self.parenthesize("var", node.name.lexeme, node.initializer)
        if isinstance(node, Block):
            return self.parenthesize("block", *node.statements)
        if isinstance(node, IfStmt):
            if node.else_branch is None:
                return self.parenthesize("if", node.condition, node.then_branch)
            return self.parenthesize("if-else", node.condition, node.then_branch, node.else_branch)
        if isinstance(node, WhileStmt):
            return self.parenthesize("while", node.condition, node.body)
        if isinstance(node, FuncStmt):
            params = "(" + " ".join(param.lexeme for param in node.params) + ")"
            return self.parenthesize(f"fun {node.name.lexeme}", params, *node.body)
        if isinstance(node, ReturnStmt):
            if node.value is None:
                return "(return)"
            return self.parenthesize("return", node.value)

        raise LoxError(f"cannot print '{type(node).__name__}'", internal=True)

    def parenthesize(self, name, *parts):
        """parts are nodes, or strings that are printed as is."""
        rendered = [part if isinstance(part, str) else self.print(part) for part in parts]
        return "(" + " ".join([name] + rendered) + ")"

    @staticmethod
    def literal(value):
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            return f'"{value}"'
        return str(value)
