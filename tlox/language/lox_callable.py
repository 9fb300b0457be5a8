from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from tlox.language.lox_types import LoxObject
from tlox.parsing.stmt import FunctionStmt
from tlox.runtime.environment import Environment

if TYPE_CHECKING:
    from tlox.runtime.interpreter import Interpreter


class LoxCallable(ABC):
    """Anything that can be invoked with a call expression."""
    name: str

    @abstractmethod
    def arity(self) -> int:
        """The exact number of arguments the callable accepts."""

    @abstractmethod
    def call(self, interpreter: "Interpreter", arguments: Sequence[LoxObject]) -> LoxObject:
        """Invoke the callable. The argument count has already been checked against `arity()`."""


class LoxFunction(LoxCallable):
    def __init__(self, declaration: FunctionStmt, closure: Environment) -> None:
        self.name = declaration.name.lexeme
        self.params = declaration.params
        self.body = declaration.body
        self.closure = closure

    def arity(self) -> int:
        return len(self.params)

    def call(self, interpreter: "Interpreter", arguments: Sequence[LoxObject]) -> LoxObject:
        environment = Environment(self.closure)
        for param, arg in zip(self.params, arguments):
            environment.define(param.lexeme, arg)
        try:
            interpreter.execute_block(self.body, environment)
        except LoxReturn as value:
            return value.value
        return None

    def __str__(self) -> str:
        return f"<fn {self.name}>"

    def __repr__(self) -> str:
        return f"<function {self.name}({', '.join(param.lexeme for param in self.params)})>"


class LoxNativeFunction(LoxCallable):
    """A function implemented in Python, which never touches the AST."""

    def __init__(self, name: str, arity: int, function: Callable[..., LoxObject]) -> None:
        self.name = name
        self._arity = arity
        self._function = function

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: "Interpreter", arguments: Sequence[LoxObject]) -> LoxObject:
        return self._function(*arguments)

    def __str__(self) -> str:
        return "<native fn>"

    def __repr__(self) -> str:
        return f"<native function {self.name}>"


class LoxReturn(Exception):
    """Unwinds the Python stack from a `return` statement up to the enclosing call."""

    def __init__(self, value: Optional[LoxObject]) -> None:  # pylint: disable=super-init-not-called
        self.value = value
