"""Command-line entry point for the Lox interpreter: runs a script file, or starts the interactive shell when no file is
given. Exit codes follow sysexits.h.
"""

import argparse
import sys

from lox.lang.error import ErrorHandler
from lox.lang.session import FileLoadError, Session
from lox.lang.shell import Shell

EX_OK = 0
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66

RECURSION_LIMIT = 5000  # each Lox call takes several Python frames


class ArgumentParser(argparse.ArgumentParser):
    """argparse exits with status 2 on bad usage; Lox uses EX_USAGE."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EX_USAGE, f"{self.prog}: error: {message}\n")


def parse_args(argv=None):
    parser = ArgumentParser(prog="lox", description="Lox tree-walking interpreter.")
    parser.add_argument("script", help="file to interpret and run (if empty, goes to interactive mode)", nargs="?")
    parser.add_argument("--ast", action="store_true", help="print the syntax tree of each statement instead of running")
    parser.add_argument("--no-color", action="store_true", help="never color diagnostics")
    return parser.parse_args(argv)


def main(argv=None):
    """Runs the Lox interpreter and returns the process exit code."""
    assert sys.version_info >= (3, 7), "lox cannot be run with python < 3.7"

    args = parse_args(argv)
    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    with ErrorHandler(color=False if args.no_color else None) as error_handler:
        sess = Session(error_handler, show_ast=args.ast)

        if args.script is not None:
            try:
                sess.run_file(args.script)
            except FileLoadError as error:
                print(error.message)
                return EX_NOINPUT

            return EX_DATAERR if sess.failed else EX_OK

        Shell(sess).cmdloop()

    return EX_DATAERR if error_handler.failed else EX_OK
