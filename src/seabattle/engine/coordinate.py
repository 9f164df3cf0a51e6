"""Grid addressing for the SeaBattle engine."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from seabattle.errors import PlacementError

ROWS = "ABCDEFGHIJ"
COLUMNS = range(1, 11)

_WRONG_COORDINATES = "You entered the wrong coordinates!"


@dataclass(frozen=True)
class Coordinate:
    """Immutable board address: a row letter and a 1-based column."""

    row: str
    column: int

    def __str__(self) -> str:
        return f"{self.row}{self.column}"

    @classmethod
    def from_text(cls, text: str) -> Coordinate:
        """Decode ``A1``..``J10``, rejecting anything outside the grid."""
        if not 2 <= len(text) <= 3:
            raise PlacementError(
                _WRONG_COORDINATES,
                f"Invalid coordinate {text!r}: expected 2-3 characters like 'A1' or 'J10'",
            )
        row, digits = text[0], text[1:]
        if row not in ROWS:
            raise PlacementError(
                _WRONG_COORDINATES,
                f"Invalid coordinate {text!r}: row must be a letter between A and J",
            )
        if not (digits.isascii() and digits.isdigit()):
            raise PlacementError(
                _WRONG_COORDINATES,
                f"Invalid coordinate {text!r}: column {digits!r} is not a number",
            )
        column = int(digits)
        if column not in COLUMNS:
            raise PlacementError(
                _WRONG_COORDINATES,
                f"Invalid coordinate {text!r}: column must be between 1 and 10",
            )
        return cls(row, column)

    @staticmethod
    def between(a: Coordinate, b: Coordinate, expand: int = 0) -> set[Coordinate]:
        """Return the rectangle spanned by ``a`` and ``b``, grown by ``expand``.

        Results are not clamped to the grid; cells past the edge only ever end
        up in set intersections.
        """
        low_row = min(ord(a.row), ord(b.row)) - expand
        high_row = max(ord(a.row), ord(b.row)) + expand
        low_col = min(a.column, b.column) - expand
        high_col = max(a.column, b.column) + expand
        return {
            Coordinate(chr(row), col)
            for row in range(low_row, high_row + 1)
            for col in range(low_col, high_col + 1)
        }

    @staticmethod
    def is_diagonal(a: Coordinate, b: Coordinate) -> bool:
        """True when ``a`` and ``b`` share neither a row nor a column."""
        return a.row != b.row and a.column != b.column

    @staticmethod
    def grid() -> Iterator[Coordinate]:
        """Yield every on-board coordinate, row by row."""
        for row in ROWS:
            for col in COLUMNS:
                yield Coordinate(row, col)


def parse_placement(text: str) -> tuple[Coordinate, Coordinate]:
    """Decode a placement request such as ``"A1 A5"`` into its two endpoints."""
    parts = text.split(" ")
    if len(parts) != 2:
        raise PlacementError(
            _WRONG_COORDINATES,
            f"Invalid placement {text!r}: expected two coordinates separated by a space",
        )
    front, back = parts
    return Coordinate.from_text(front), Coordinate.from_text(back)
