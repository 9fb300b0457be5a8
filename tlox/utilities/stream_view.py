from __future__ import annotations  # Reference the parent class in methods' annotations.

from typing import Any, Generic, Optional, Sequence, TypeVar

T = TypeVar("T")  # pylint: disable=invalid-name


class StreamView(Generic[T]):
    """A "scrolling" view of a Sequence, similar to an Iterator. StreamView allows peeking
    of arbitrary elements without consumption and retrieval of the range consumed since
    a marker was set."""

    def __init__(self, sequence: Sequence[T]) -> None:
        self.sequence = sequence
        self.current_index: int = 0
        self.marker_index: int = 0

    def __getitem__(self, index):  # type: ignore
        return self.sequence[index]

    def __len__(self) -> int:
        return len(self.sequence)

    def has_next(self, lookahead: int = 0) -> bool:
        return self.current_index + lookahead < len(self)

    def set_marker(self) -> None:
        """Place a marker at the current index, for use by `get_slice_from_marker()`."""
        self.marker_index = self.current_index

    def peek(self, lookahead: int = 0) -> Optional[T]:
        """Return the value `lookahead` from the next one, if there is one."""
        index = self.current_index + lookahead
        if 0 <= index < len(self):
            return self[index]
        return None

    def peek_unwrap(self, lookahead: int = 0) -> T:
        """Variant of `peek()` that always returns a value. Produces an exception
        if there is not a value at `lookahead`."""
        res = self.peek(lookahead)
        assert res is not None
        return res

    def previous(self) -> T:
        """Return the most recently consumed value."""
        return self.peek_unwrap(-1)

    def match(self, *expected: Any) -> bool:
        """Test if the next value is one of the `expected` values."""
        return self.peek() in expected

    def advance(self) -> T:
        """Consume the next value if there is one and return it."""
        if (next_item := self.peek()) is not None:
            self.current_index += 1
            return next_item
        raise IndexError("Items have been exhausted.")

    def advance_if_match(self, *expected: Any) -> bool:
        """Test if the next value is one of the `expected` values. If so, consume it."""
        if self.match(*expected):
            self.advance()
            return True
        return False

    def get_slice_from_marker(self) -> Sequence[T]:
        """Return the slice from the marked position to the current value."""
        return self[self.marker_index:self.current_index]
