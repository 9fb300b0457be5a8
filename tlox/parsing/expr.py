from dataclasses import dataclass
from typing import List

from tlox.language.lox_types import LoxPrimitive, lox_object_to_repr
from tlox.lexing.token import Token
from tlox.utilities import ast_node_pretty_printer


class Expr:
    """Base class for expressions which have differing attributes."""

    def __str__(self) -> str:
        name, values = ast_node_pretty_printer(self, "Expr")
        return f"({name} {' '.join(values)})"


@dataclass
class AssignmentExpr(Expr):
    name: Token
    value: Expr

    def __str__(self) -> str:
        return f"(= {self.name.lexeme} {self.value})"


@dataclass
class BinaryExpr(Expr):
    operator: Token
    left: Expr
    right: Expr

    def __str__(self) -> str:
        return f"({self.operator.lexeme} {self.left} {self.right})"


@dataclass
class LogicalExpr(BinaryExpr):
    """A short-circuiting `and` or `or`."""


@dataclass
class CallExpr(Expr):
    callee: Expr
    paren: Token
    arguments: List[Expr]

    def __str__(self) -> str:
        return f"(call {self.callee} [{', '.join(map(str, self.arguments))}])"


@dataclass
class GroupingExpr(Expr):
    expression: Expr


@dataclass
class LiteralExpr(Expr):
    value: LoxPrimitive

    def __str__(self) -> str:
        return lox_object_to_repr(self.value)


@dataclass
class UnaryExpr(Expr):
    operator: Token
    right: Expr

    def __str__(self) -> str:
        return f"({self.operator.lexeme} {self.right})"


@dataclass
class VariableExpr(Expr):
    name: Token
