"""Values that can be called from Lox code."""

from abc import ABC, abstractmethod

from lox.runtime.environment import Environment


class LoxCallable(ABC):
    """Anything a Call expression can invoke."""

    @abstractmethod
    def arity(self):
        """Number of arguments this callable expects. Calls must match it exactly."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Invokes this callable with already evaluated arguments and returns its result (None for nil). Assumes
        len(arguments) == self.arity().
        """


class Function(LoxCallable):
    """User-defined function, created when a FuncStmt is executed.

    Every call gets a fresh environment whose parent is the interpreter's globals, not the environment the function was
    declared in: a function nested inside another function does not see the enclosing function's locals.
    """

    def __init__(self, declaration):
        self.declaration = declaration

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        environment = Environment(interpreter.globals)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        outcome = interpreter.execute_block(self.declaration.body, environment)
        return outcome.value if outcome is not None else None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"

    def __repr__(self):
        return f"Function({self.declaration.name.lexeme!r})"


class NativeFunction(LoxCallable):
    """Callable implemented in Python. function receives the Lox arguments positionally."""

    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(*arguments)

    def __str__(self):
        return f"<native fn {self.name}>"

    def __repr__(self):
        return f"NativeFunction({self.name!r}, {self._arity})"
