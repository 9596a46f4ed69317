"""Value types shared by the analyzers."""

from __future__ import annotations

from dataclasses import dataclass, field

from gqlguard.analysis.errors import CostOverflowError

# Largest cost representable as a signed 64-bit integer
MAX_COST = 2**63 - 1

# Recursion ceiling for both walkers, independent of any configured limit
DEFAULT_MAX_NESTING = 256

# Largest configurable recursion ceiling, well under the interpreter recursion limit
MAX_NESTING_CEILING = 512

# Weight of a coordinate missing from the cost map
DEFAULT_FIELD_COST = 1


@dataclass(frozen=True, order=True)
class Cost:
    """A non-negative aggregate field cost."""

    value: int = 0

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"cost cannot be negative: {self.value}")
        if self.value > MAX_COST:
            raise CostOverflowError(f"cost {self.value} exceeds {MAX_COST}")

    def __add__(self, other: Cost | int) -> Cost:
        if isinstance(other, Cost):
            other = other.value
        elif not isinstance(other, int):
            return NotImplemented
        total = self.value + other
        if total > MAX_COST:
            raise CostOverflowError(f"cost {total} exceeds {MAX_COST}")
        return Cost(total)

    __radd__ = __add__

    def __int__(self) -> int:
        return self.value

    def exceeds(self, limit: int) -> bool:
        return self.value > limit


@dataclass(frozen=True)
class FragmentPath:
    """Names of the fragments spread on the way to the current selection."""

    names: tuple[str, ...] = field(default_factory=tuple)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def enter(self, name: str) -> FragmentPath:
        return FragmentPath(self.names + (name,))
