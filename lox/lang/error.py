"""Error handling for the Lox interpreter. Only LoxErrors should be encountered during a run: if another type of error
is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Lox has two independent error channels:
    1. Static errors (lexical and parse errors): reported as soon as they are found. Scanning and parsing always run to
       completion, but a run with a static error is never executed.
    2. Runtime errors: raised during evaluation and propagated up to the top-level interpret loop, which reports the
       error and aborts the remaining statements of that run.

Both are rendered the same way: `[line N] Error<where>: message`.
"""

import sys

from termcolor import colored

from lox.grammar.tokens import TokenKind


class LoxError(Exception):
    """Base class for Lox errors. internal marks errors that point to a bug in the interpreter itself."""

    def __init__(self, message, internal=False):
        super().__init__(message)
        self.message = message
        self.internal = internal


class ParseError(LoxError):
    """Raised by the parser when a statement cannot be parsed. Caught only by the parser's error recovery."""

    def __init__(self, token, message):
        super().__init__(message)
        self.token = token


class LoxRuntimeError(LoxError):
    """Raised during evaluation. token is used to locate the error in the source."""

    def __init__(self, token, message):
        super().__init__(message)
        self.token = token


class ErrorHandler:
    """Context manager that reports Lox errors and keeps track of whether the current run has failed."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, out=None, color=None):
        self.out = out if out is not None else sys.stdout
        if color is None:
            isatty = getattr(self.out, "isatty", None)
            color = bool(isatty and isatty())
        self.color = color

        self.had_error = False          # lexical/parse errors: suppresses execution
        self.had_runtime_error = False

    @property
    def failed(self):
        """Whether or not any error has been reported since the last reset."""
        return self.had_error or self.had_runtime_error

    def reset(self):
        """Clears error flags. Called between lines in interactive mode."""
        self.had_error = False
        self.had_runtime_error = False

    def error(self, line, message):
        """Reports a static error that has no token to point at (lexical errors)."""
        self.report(line, "", message)

    def token_error(self, token, message):
        """Reports a static error located at token."""
        self.report(line=token.line, where=self.where(token), message=message)

    def runtime_error(self, error):
        """Reports a LoxRuntimeError raised during evaluation."""
        self._print(self._prefix(error.token.line, self.where(error.token)), error.message)
        self.had_runtime_error = True

    def report(self, line, where, message):
        self._print(self._prefix(line, where), message)
        self.had_error = True

    @staticmethod
    def where(token):
        """Location suffix for token: ' at end' for the end of input, else ' at '<lexeme>''."""
        if token.kind is TokenKind.EOF:
            return " at end"
        return f" at '{token.lexeme}'"

    def _prefix(self, line, where):
        return self._colored(f"[line {line}] Error{where}:", ErrorHandler.ERROR)

    def _print(self, prefix, message):
        print(f"{prefix} {message}", file=self.out)

    def throw(self, error):
        """Reports a LoxError that escaped to the handler (no line information available)."""
        error_msg = ""
        if error.internal:
            error_msg += self._colored("[internal] ", ErrorHandler.ERROR)

        error_msg += self._colored("error: ", ErrorHandler.ERROR) + error.message
        print(error_msg, file=self.out)
        self.had_runtime_error = True

    def _colored(self, text, color):
        return colored(text, color, attrs=["bold"]) if self.color else text

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            print(self._colored("keyboard interrupt", ErrorHandler.WARNING), file=self.out)
            self.had_runtime_error = True
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is not None and issubclass(exc_type, LoxError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(LoxError(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
