"""Progressive bracket resolution shared by the tax models."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Optional, Sequence

from patrimoine.core.financial import pct_to_rate
from patrimoine.domain.models.fiscal import RateSlice


def find_bracket(floors: Sequence[float], value: float) -> Optional[int]:
    """Index of the greatest floor <= value, None below the first floor.

    Args:
        floors: Strictly increasing bracket floors
        value: Value to locate

    Returns:
        Bracket index or None
    """
    index = bisect_right(floors, value) - 1
    return index if index >= 0 else None


@dataclass(frozen=True)
class Bracket:
    floor: float
    rate: float  # fractional
    disc: float  # amount to subtract from value * rate


class RateGrid:
    """Progressive grid with precomputed per-bracket deductions.

    With `disc`, the tax of a value in bracket i is `value * rate_i - disc_i`,
    which equals the sum of the slices taxed at their own rate.
    """

    def __init__(self, slices: Sequence[RateSlice]):
        brackets: list[Bracket] = []
        for i, s in enumerate(slices):
            rate = pct_to_rate(s.rate)
            if i == 0:
                disc = s.floor * rate
            else:
                prev = brackets[-1]
                disc = prev.disc + s.floor * (rate - prev.rate)
            brackets.append(Bracket(s.floor, rate, disc))
        self.brackets = tuple(brackets)
        self._floors = [b.floor for b in brackets]

    def bracket(self, value: float) -> Optional[Bracket]:
        index = find_bracket(self._floors, value)
        return None if index is None else self.brackets[index]

    def marginal_rate(self, value: float) -> float:
        bracket = self.bracket(value)
        return 0.0 if bracket is None else bracket.rate

    def tax(self, value: float) -> float:
        bracket = self.bracket(value)
        if bracket is None:
            return 0.0
        return value * bracket.rate - bracket.disc
