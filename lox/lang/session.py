"""Session control for Lox. Runs source text through the whole pipeline (lexer, parser, interpreter), either once for a
script file or line by line in interactive mode.
"""

import io

from lox.grammar.lexical import Lexer
from lox.grammar.parser import Parser
from lox.grammar.printer import AstPrinter
from lox.grammar.tokens import TokenKind
from lox.lang.error import ErrorHandler, LoxError
from lox.runtime.interpreter import Interpreter


class FileLoadError(LoxError):
    """Raised when a script file cannot be read."""

    def __init__(self, path):
        super().__init__(f"Error loading file {path}")
        self.path = path


class Session:
    """Governs a Lox session: one interpreter, whose globals persist from one run to the next, and the error state of
    the current run.
    """

    def __init__(self, error_handler, out=None, show_ast=False):
        self.error_handler = error_handler
        self.out = out if out is not None else error_handler.out
        self.show_ast = show_ast  # print syntax trees instead of running them

        self.interpreter = Interpreter(error_handler, self.out)
        self.printer = AstPrinter()

    @property
    def failed(self):
        return self.error_handler.failed

    def reset(self):
        """Forgets errors from previous runs. Program state (globals) is kept."""
        self.error_handler.reset()

    def run(self, source):
        """Scans, parses and runs source. Lexical and parse errors are reported first; the statements that parsed
        still run afterwards.
        """
        tokens = Lexer(source, self.error_handler).scan_tokens()
        statements = Parser(tokens, self.error_handler).parse()

        if self.show_ast:
            try:
                for statement in statements:
                    print(self.printer.print(statement), file=self.out)
            except RecursionError:
                self.error_handler.throw(LoxError("Expression nesting too deep."))
            return

        self.interpreter.interpret(statements)

    def run_file(self, path):
        """Reads path as UTF-8 and runs it. Raises FileLoadError if the file cannot be read."""
        try:
            with open(path, "r", encoding="utf-8") as file:
                source = file.read()
        except (OSError, UnicodeDecodeError):
            raise FileLoadError(path)

        self.run(source)

    @staticmethod
    def preprocess_line(line, tmp_line=""):
        """Prepends an unfinished previous line (tmp_line) to line. Returns the combined source and whether or not it
        opens more braces than it closes, in which case the shell should read another line before running it.

        Braces are counted on tokens, so braces inside strings and comments do not count. Diagnostics from this scan are
        dropped: they are reported again when the source is run.
        """
        if tmp_line:
            line = tmp_line + "\n" + line

        depth = 0
        for token in Lexer(line, ErrorHandler(out=io.StringIO(), color=False)).scan_tokens():
            if token.kind is TokenKind.LEFT_BRACE:
                depth += 1
            elif token.kind is TokenKind.RIGHT_BRACE:
                depth -= 1
        return line, depth > 0
