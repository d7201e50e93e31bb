"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Self
from uuid import UUID

CENTS = Decimal("0.01")
WHOLE_UNIT = Decimal("1")


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def times(self, factor: int | Decimal) -> "Money":
        return Money(amount=self.amount * Decimal(factor))

    def rounded(self) -> "Money":
        """Round half-up to the nearest cent."""
        return Money(amount=self.amount.quantize(CENTS, rounding=ROUND_HALF_UP))

    def rounded_to_whole_unit(self) -> "Money":
        """Round half-up to the nearest whole currency unit, kept at 2 dp."""
        whole = self.amount.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)
        return Money(amount=whole.quantize(CENTS))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Positive integer representing the nominal number of admissions."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 1:
            raise ValueError("Capacity must be at least 1")

    def is_reached_by(self, active_count: int) -> bool:
        return active_count >= self.value


@dataclass(frozen=True)
class FeeMultiplier:
    """Last-minute fee multiplier, never below 1."""

    value: Decimal

    DEFAULT = Decimal("1.75")

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            object.__setattr__(self, "value", Decimal(str(self.value)))
        if self.value < 1:
            raise ValueError("Fee multiplier cannot be below 1")
