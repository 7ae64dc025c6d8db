"""Scopes for Lox variables. An Environment maps names to values and links to the scope that encloses it; the chain
ends at the interpreter's globals.
"""

from lox.lang.error import LoxRuntimeError


class Environment:
    """One scope. One is created per block entry and per function call."""

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        """Binds name in this scope only, shadowing any binding of the same name further out. Redefining a name in the
        same scope silently replaces it.
        """
        self.values[name] = value

    def get(self, name):
        """Looks up the value bound to token name, innermost scope first."""
        environment = self.resolve(name.lexeme)
        if environment is None:
            raise LoxRuntimeError(name, f"Undefined variable name '{name.lexeme}'.")
        return environment.values[name.lexeme]

    def assign(self, name, value):
        """Rebinds token name in the innermost scope that already defines it. Never creates a binding."""
        environment = self.resolve(name.lexeme)
        if environment is None:
            raise LoxRuntimeError(name, f"Undefined variable: '{name.lexeme}'.")
        environment.values[name.lexeme] = value

    def resolve(self, name):
        """Returns the innermost environment in the chain that defines name, or None."""
        environment = self
        while environment is not None:
            if name in environment.values:
                return environment
            environment = environment.enclosing
        return None

    def __contains__(self, name):
        return self.resolve(name) is not None

    def __repr__(self):
        return f"Environment({self.values!r}, enclosing={self.enclosing!r})"
