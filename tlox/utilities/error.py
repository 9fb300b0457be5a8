from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple

from termcolor import colored

from tlox.utilities import eprint
from tlox.utilities.configuration import Debug, ExitCode

if TYPE_CHECKING:
    from tlox.lexing.token import Token

NOT_REACHED = AssertionError("Unreachable code reached")


@dataclass(frozen=True)
class CallFrame:
    """An active Lox function call, as recorded for backtraces."""
    name: str
    call_line: int


class LoxExit(Exception):
    """Abort the current run, carrying the exit code the process should use."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


class LoxError(Exception):
    """Base class for every diagnostic reported against Lox source code."""

    def __init__(
            self,
            line: Optional[int],
            message: str,
            *,
            where: str = "",
            offset: Optional[int] = None,
            length: int = 1,
            fatal: bool = False
    ) -> None:
        super().__init__(message)
        self.line = line
        self.message = message
        self.where = where
        self.offset = offset
        self.length = length
        self.fatal = fatal
        self.backtrace: Optional[Tuple[CallFrame, ...]] = None

    @classmethod
    def at_token(cls, token: Token, message: str, *, fatal: bool = False) -> LoxError:
        """Build an error located at `token`."""
        from tlox.lexing.token import Tk

        where = "at end" if token.token_type is Tk.EOF else f"at '{token.lexeme}'"
        return cls(
            token.line,
            message,
            where=where,
            offset=token.offset,
            length=max(len(token.lexeme), 1),
            fatal=fatal
        )

    def __str__(self) -> str:
        location = f" {self.where}" if self.where else ""
        prefix = f"[line {self.line}] " if self.line is not None else ""
        return f"{prefix}{type(self).__name__}{location}: {self.message}"


class LoxSyntaxError(LoxError):
    """A static error, detected before any code runs."""


class LoxLexicalError(LoxSyntaxError):
    """A malformed lexeme."""


class LoxRuntimeError(LoxError):
    """An error that aborts execution of an otherwise well-formed program."""


class LoxStackOverflowError(LoxError):
    """The call stack was exhausted. Unlike a `LoxRuntimeError`, this is always fatal."""

    def __init__(self, line: Optional[int], message: str = "Stack overflow.", **kwargs) -> None:  # type: ignore
        kwargs["fatal"] = True
        super().__init__(line, message, **kwargs)


class LoxErrorHandler:
    """Collects errors over a run and reports them to stderr as they arrive."""

    def __init__(self, debug_flags: Debug = Debug(0), *, echo: bool = True) -> None:
        self.debug_flags = debug_flags
        self.errors: List[LoxError] = list()
        self._echo = echo
        self._source = ""
        self._source_lines: List[str] = list()

    @property
    def error_state(self) -> bool:
        return bool(self.errors)

    def set_source(self, source: str) -> None:
        """Provide the source being run, used to show the offending line of an error."""
        self._source = source
        self._source_lines = source.splitlines()

    def reset(self) -> None:
        self.errors.clear()

    def err(self, error: LoxError) -> None:
        self.errors.append(error)
        if self._echo:
            self._report(error)

    def checkpoint(self) -> None:
        """Stop the run if any errors have been reported so far."""
        if not self.errors:
            return
        if any(isinstance(error, LoxSyntaxError) for error in self.errors):
            raise LoxExit(ExitCode.STATIC_ERROR)
        raise LoxExit(ExitCode.RUNTIME_ERROR)

    # ~~~ Reporting ~~~

    def _report(self, error: LoxError) -> None:
        if self.debug_flags & Debug.REDUCED_ERROR_REPORTING:
            eprint(error)
        else:
            eprint(colored(str(error), "red", attrs=["bold"]))
            if (excerpt := self._excerpt(error)) is not None:
                eprint(excerpt)
        if self.debug_flags & Debug.BACKTRACE and error.backtrace:
            for frame in error.backtrace:
                eprint(f"    in {frame.name}() called from line {frame.call_line}")

    def _excerpt(self, error: LoxError) -> Optional[str]:
        """Render the source line of `error` with the offending lexeme underlined."""
        if error.line is None or error.offset is None or not 0 < error.line <= len(self._source_lines):
            return None
        text = self._source_lines[error.line - 1]
        # Lexemes may span lines (strings), the line they start on is what gets shown.
        line_start = self._source.rfind("\n", 0, error.offset) + 1
        column = error.offset - line_start
        if not 0 <= column <= len(text):
            return None
        length = max(1, min(error.length, len(text) - column))
        gutter = f"{error.line:>4} | "
        underline = " " * (len(gutter) + column) + colored("^" + "~" * (length - 1), "red", attrs=["bold"])
        return f"{gutter}{text}\n{underline}"
