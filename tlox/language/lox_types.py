import math
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from tlox.language.lox_callable import LoxCallable

LoxLiteral = Union[str, float]
LoxPrimitive = Union[float, str, bool, None]
LoxObject = Union[LoxPrimitive, "LoxCallable"]


def lox_is_valid_identifier_start(char: Optional[str]) -> bool:
    if char is None:
        return False
    return char.isascii() and (char.isalpha() or char == "_")


def lox_is_valid_identifier_name(char: Optional[str]) -> bool:
    if char is None:
        return False
    return lox_is_valid_identifier_start(char) or char in "0123456789"


def _number_to_str(number: float) -> str:
    """Positional notation with the fewest digits that read back as the same float.
    Integral values have no decimal point, however large they are."""
    if not math.isfinite(number):
        return str(number)
    digits = Decimal(repr(number))
    if number.is_integer():
        digits = digits.to_integral_value()
    return format(digits, "f")


def lox_object_to_str(obj: LoxObject) -> str:
    """Represent a Lox object as `print` shows it."""
    if obj is None:
        return "nil"
    if isinstance(obj, bool):
        return "true" if obj else "false"
    if isinstance(obj, float):
        return _number_to_str(obj)
    return str(obj)


def lox_object_to_repr(obj: LoxObject) -> str:
    """Represent a Lox object the way it would be written in source code."""
    if isinstance(obj, str):
        return f'"{obj}"'
    return lox_object_to_str(obj)


def lox_truth(obj: LoxObject) -> bool:
    """Evaluate the truthiness of a Lox object.

    `false` and `nil` are the only falsy objects."""
    if obj is None:
        return False
    if isinstance(obj, bool):
        return obj
    return True


def lox_equality(left: LoxObject, right: LoxObject) -> bool:
    """Evaluate if two Lox objects are equal. There is no coercion between types."""
    if type(left) is type(right):
        return left == right
    return False
