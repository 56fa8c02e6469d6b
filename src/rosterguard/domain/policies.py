"""Policy definitions for pattern placement rules.

Policies are kept separate from the grid engine so product rules can be
tested independently and swapped without touching the overlap math.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable

from rosterguard.domain.models import Shift, count_full_shifts


class PlacementPolicy(ABC):
    """Abstract base class for per-cell placement limits."""

    @abstractmethod
    def max_full_shifts_per_day(self) -> int:
        """Maximum number of shifts per cell that do not cross midnight."""
        pass

    @abstractmethod
    def can_add(self, existing: Iterable[Shift], candidate: Shift) -> bool:
        """Check whether the cap allows adding a shift to a cell.

        Args:
            existing: Shifts already in the cell.
            candidate: Shift being placed.

        Returns:
            True if the cap is not exceeded by the candidate.
        """
        pass


@dataclass
class DefaultPlacementPolicy(PlacementPolicy):
    """Default placement policy.

    A day cell holds at most one full (same-day) shift. Overnight shifts
    do not count against the cap, so an overnight shift can share a cell
    with a full shift when they do not overlap.
    """

    max_full_shifts: int = 1

    def max_full_shifts_per_day(self) -> int:
        return self.max_full_shifts

    def can_add(self, existing: Iterable[Shift], candidate: Shift) -> bool:
        if candidate.spans_midnight:
            return True
        return count_full_shifts(existing) < self.max_full_shifts
