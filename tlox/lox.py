from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List

from tlox.lexing.scanner import Scanner
from tlox.parsing.parser import Parser
from tlox.runtime.interpreter import Interpreter
from tlox.utilities import raised_recursion_limit
from tlox.utilities.configuration import PROMPT_CHARACTER, PYTHON_RECURSION_LIMIT, Debug, ExitCode
from tlox.utilities.error import LoxError, LoxErrorHandler, LoxExit, LoxRuntimeError, LoxStackOverflowError


class Outcome(Enum):
    SUCCESS = auto()
    STATIC_ERROR = auto()
    RUNTIME_ERROR = auto()
    FATAL_ERROR = auto()


@dataclass
class RunResult:
    """The outcome of running one piece of source code, with every error reported along the way."""
    outcome: Outcome
    errors: List[LoxError] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[LoxError]) -> "RunResult":
        outcome = Outcome.SUCCESS
        if any(isinstance(error, LoxStackOverflowError) for error in errors):
            outcome = Outcome.FATAL_ERROR
        elif any(isinstance(error, LoxRuntimeError) for error in errors):
            outcome = Outcome.RUNTIME_ERROR
        elif errors:
            outcome = Outcome.STATIC_ERROR
        return cls(outcome, list(errors))

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def exit_code(self) -> ExitCode:
        if self.outcome is Outcome.SUCCESS:
            return ExitCode.SUCCESS
        if self.outcome is Outcome.STATIC_ERROR:
            return ExitCode.STATIC_ERROR
        return ExitCode.RUNTIME_ERROR


class Lox:
    def __init__(self, debug_flags: Debug = Debug(0), *, echo_errors: bool = True) -> None:
        self.error_handler = LoxErrorHandler(debug_flags, echo=echo_errors)
        self._debug_flags = debug_flags
        self.interpreter = Interpreter(self.error_handler, debug_flags=debug_flags)

    @property
    def debug_flags(self) -> Debug:
        return self._debug_flags

    @debug_flags.setter
    def debug_flags(self, flags: Debug) -> None:
        self._debug_flags = flags
        self.error_handler.debug_flags = flags
        self.interpreter.debug_flags = flags

    def run_file(self, path: str) -> RunResult:
        with open(path, 'r') as fil:
            return self.run(fil.read())

    def run_interactive(self) -> None:
        while True:
            try:
                self.run(input(PROMPT_CHARACTER), echo=True)
            except (KeyboardInterrupt, EOFError):  # Exit gracefully on ctrl-c or ctrl-d.
                print()
                return

    def run(self, source: str, *, echo: bool = False) -> RunResult:
        """Scan, parse and execute `source`. Lexical and syntax errors are all gathered
        before giving up; nothing is executed if there are any.

        Definitions persist across runs on the same instance."""
        source = source.replace("\r\n", "\n")
        self.error_handler.reset()
        self.error_handler.set_source(source)

        try:
            with raised_recursion_limit(PYTHON_RECURSION_LIMIT):  # Deeply nested source recurses in the parser.
                tokens = Scanner(source, self.error_handler, debug_flags=self._debug_flags).scan_tokens()
                if self._debug_flags & Debug.NO_PARSE:
                    raise LoxExit(ExitCode.SUCCESS)

                statements = Parser(
                    tokens,
                    self.error_handler,
                    dump=bool(self._debug_flags & Debug.DUMP_AST)
                ).parse()

            self.error_handler.checkpoint()
            if self._debug_flags & Debug.NO_INTERPRET:
                raise LoxExit(ExitCode.SUCCESS)
            self.interpreter.interpret(statements, echo=echo)
            self.error_handler.checkpoint()
        except LoxExit:
            pass

        return RunResult.from_errors(self.error_handler.errors)


def interpret(source: str) -> RunResult:
    """Run `source` in a fresh interpreter. Program output goes to stdout, diagnostics to stderr."""
    return Lox().run(source)
