import os
import sys

from lox import parser, scanner
from lox.errors import ErrorReporter, LoxError
from lox.interpreter import Interpreter
from lox.scanner import ScanningFailed

EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66


def run_source(src: str, interpreter: Interpreter):
    tokens = scanner.tokenize(src)
    statements = parser.parse(tokens)
    interpreter.interpret(statements)


def run(src: str, interpreter: Interpreter, reporter: ErrorReporter, path: str = None):
    try:
        run_source(src, interpreter)
    except ScanningFailed as e:
        reporter.report_all(e.exceptions, path)
    except LoxError as e:
        reporter.report(e, path)
    except Exception as e:
        # anything else is a bug in the interpreter (or a too deep recursion)
        if os.getenv("LOX_DEBUG"):
            raise
        reporter.internal(e)


def run_file(path: str, reporter: ErrorReporter = None, interpreter: Interpreter = None) -> int:
    reporter = reporter or ErrorReporter()
    interpreter = interpreter or Interpreter()

    try:
        with open(path) as fd:
            src = fd.read()
    except OSError as e:
        reporter.unreadable(path, e)
        return EX_NOINPUT

    run(src, interpreter, reporter, path)

    if reporter.had_error:
        return EX_DATAERR
    return 0


def run_prompt(reporter: ErrorReporter = None, interpreter: Interpreter = None) -> int:
    reporter = reporter or ErrorReporter()
    interpreter = interpreter or Interpreter()

    while True:
        try:
            line = input("> ")
        except EOFError:
            break
        if not line:
            break

        run(line, interpreter, reporter)
        reporter.reset()

    return 0


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    match args:
        case []:
            return run_prompt()
        case [path]:
            return run_file(path)
        case _:
            print("Usage: lox [script]")
            return EX_USAGE


if __name__ == "__main__":
    sys.exit(main())
