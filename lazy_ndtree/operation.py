"""Pending bulk mutations held at segment tree nodes."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Operation:
    """An "assign constant" or "add constant" applied to every cell of a domain.

    Attributes:
        is_reset: True for an assignment, False for an addition.
        delta: The assigned value when is_reset, otherwise the amount added.

    The default-constructed value, an add of zero, is the identity: composing
    it with any operation in either order returns that operation.
    """

    is_reset: bool = False
    delta: int = 0

    @classmethod
    def identity(cls) -> "Operation":
        return cls()

    @classmethod
    def assign(cls, value: int) -> "Operation":
        return cls(True, int(value))

    @classmethod
    def add(cls, delta: int) -> "Operation":
        return cls(False, int(delta))

    @property
    def is_identity(self) -> bool:
        return not self.is_reset and self.delta == 0

    def compose(self, old: "Operation") -> "Operation":
        """Return the operation equivalent to applying ``old`` and then ``self``.

        An assignment discards whatever was pending before it; additions
        accumulate onto the pending operation, keeping its reset flag.
        """
        if self.is_reset:
            return self
        if self.delta == 0:
            return old
        return Operation(old.is_reset, old.delta + self.delta)

    def evaluate(self, value: int, volume: int) -> int:
        """Sum over a domain of ``volume`` cells after applying this operation.

        Args:
            value: Current sum over the domain.
            volume: Number of cells in the domain.
        """
        if self.is_reset:
            return volume * self.delta
        return value + volume * self.delta

    def __repr__(self) -> str:
        if self.is_reset:
            return f"Operation.assign({self.delta})"
        return f"Operation.add({self.delta})"


IDENTITY = Operation()
