"""Pytest configuration for the tlox test suite."""

from typing import Callable, List, Tuple

import pytest

from tlox.lexing.scanner import scan
from tlox.lox import Lox, RunResult
from tlox.parsing.parser import parse
from tlox.parsing.stmt import Stmt
from tlox.utilities.configuration import Debug
from tlox.utilities.error import LoxError

RunOutput = Tuple[RunResult, List[str], List[str]]


@pytest.fixture
def lox() -> Lox:
    return Lox(Debug.REDUCED_ERROR_REPORTING)


@pytest.fixture
def run(lox: Lox, capsys: pytest.CaptureFixture) -> Callable[..., RunOutput]:
    """Run source on a shared interpreter, returning the result with the stdout and stderr lines."""

    def _run(source: str, **kwargs: bool) -> RunOutput:
        result = lox.run(source, **kwargs)
        captured = capsys.readouterr()
        return result, captured.out.splitlines(), captured.err.splitlines()

    return _run


@pytest.fixture
def parse_source() -> Callable[[str], Tuple[List[Stmt], List[LoxError]]]:
    def _parse(source: str) -> Tuple[List[Stmt], List[LoxError]]:
        tokens, lexical_errors = scan(source)
        statements, syntax_errors = parse(tokens)
        return statements, lexical_errors + syntax_errors

    return _parse
