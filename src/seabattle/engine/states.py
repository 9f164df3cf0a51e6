"""Closed sets of per-cell display states and shot outcomes."""

from __future__ import annotations

from enum import Enum


class CellState(Enum):
    """What a single square shows on a rendered board."""

    UNKNOWN = "~"
    SHIP = "O"
    HIT = "X"
    MISS = "M"

    @property
    def symbol(self) -> str:
        return self.value

    def show(self, reveal: bool) -> CellState:
        """Project the state for display; unrevealed ships stay in the fog."""
        if reveal or self in (CellState.HIT, CellState.MISS):
            return self
        return CellState.UNKNOWN

    def __str__(self) -> str:
        return self.value


class Outcome(Enum):
    """Result of one shot, from the shooter's point of view."""

    HIT = "You hit a ship!"
    SUNK = "You sank a ship!"
    WON = "You sank the last ship. You won. Congratulations!"
    MISS = "You missed!"

    def __str__(self) -> str:
        return self.value
