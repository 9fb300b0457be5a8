from __future__ import annotations

from typing import Dict, Iterator, Optional

from tlox.language.lox_types import LoxObject
from tlox.lexing.token import Token
from tlox.utilities.error import LoxRuntimeError


class Environment:
    """A single lexical scope. Scopes are linked to the scope they are nested in, and may be
    shared: every closure created in a scope keeps it alive and sees all later changes to it."""

    def __init__(self, enclosing: Optional[Environment] = None) -> None:
        self._values: Dict[str, LoxObject] = dict()
        self.enclosing = enclosing

    def _chain(self) -> Iterator[Environment]:
        """Walk outward from this scope to the global one."""
        env: Optional[Environment] = self
        while env is not None:
            yield env
            env = env.enclosing

    def define(self, name: str, value: LoxObject) -> None:
        self._values[name] = value

    def assign(self, name: Token, value: LoxObject) -> None:
        for env in self._chain():
            if name.lexeme in env._values:
                env._values[name.lexeme] = value
                return
        raise LoxRuntimeError.at_token(name, f"Undefined variable '{name.lexeme}'.")

    def get(self, name: Token) -> LoxObject:
        for env in self._chain():
            try:
                return env._values[name.lexeme]
            except KeyError:
                pass
        raise LoxRuntimeError.at_token(name, f"Undefined variable '{name.lexeme}'.")
