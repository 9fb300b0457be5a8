from __future__ import annotations  # Circular references in annotations.

from abc import ABC
from typing import Callable, Dict, Generic, Optional, Tuple, Type, TypeVar

V = TypeVar("V")
R = TypeVar("R")


class Visitor(Generic[V, R], ABC):
    """Base class that acts as a visitor in the visitor pattern.

    Implementations of visit methods are structured as follows:
    `def _visit_<Class>__(self, visitable)`

    The most specific implementation along the visitable's MRO wins, so a subclass
    of a node falls back to its parent's implementation unless it has its own.
    """

    # Resolved implementations, per (visitor class, visitable class).
    _dispatch_cache: Dict[Tuple[type, type], Callable[..., object]] = dict()

    def visit(self, visitable: V) -> R:
        """Attempt to find and call the correct visitor function."""
        key = (type(self), type(visitable))
        impl = Visitor._dispatch_cache.get(key)
        if impl is None:
            impl = self._resolve(type(visitable))
            Visitor._dispatch_cache[key] = impl
        return impl(self, visitable)  # type: ignore

    @classmethod
    def _resolve(cls, visitable_type: Type[object]) -> Callable[..., object]:
        for class_ in visitable_type.mro():
            impl: Optional[Callable[..., object]] = getattr(cls, f"_visit_{class_.__name__}__", None)
            if impl is not None:
                return impl
        raise NotImplementedError(f"{cls.__name__} does not implement visit() for {visitable_type.__name__}")
