"""Ship domain model for the SeaBattle engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from seabattle.errors import PlacementError

from .coordinate import Coordinate
from .states import CellState, Outcome


class ShipType(Enum):
    """The fleet every player places, in placement order."""

    AIRCRAFT_CARRIER = ("Aircraft Carrier", 5)
    BATTLESHIP = ("Battleship", 4)
    SUBMARINE = ("Submarine", 3)
    CRUISER = ("Cruiser", 3)
    DESTROYER = ("Destroyer", 2)

    @property
    def display_name(self) -> str:
        return self.value[0]

    @property
    def length(self) -> int:
        """Return the number of contiguous cells the ship occupies."""
        return self.value[1]


FLEET: tuple[ShipType, ...] = tuple(ShipType)


@dataclass(eq=False)
class Ship:
    """A placed ship: two endpoints, a length, and per-cell hit tracking.

    Construction validates the placement. ``area`` and ``footprint`` are fixed
    once built; ``cells`` is the only state a shot can change.
    """

    front: Coordinate
    back: Coordinate
    length: int
    name: str
    cells: dict[Coordinate, CellState] = field(init=False)
    area: frozenset[Coordinate] = field(init=False, repr=False)
    footprint: frozenset[Coordinate] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        debug = f"{self.name} {self.length} {self.front} {self.back}"
        if Coordinate.is_diagonal(self.front, self.back):
            raise PlacementError("Wrong ship location!", debug)
        self.area = frozenset(Coordinate.between(self.front, self.back))
        if len(self.area) != self.length:
            raise PlacementError(f"Wrong length of the {self.name}!", debug)
        self.footprint = frozenset(Coordinate.between(self.front, self.back, expand=1))
        self.cells = {coord: CellState.SHIP for coord in self.area}

    @classmethod
    def of_type(cls, ship_type: ShipType, front: Coordinate, back: Coordinate) -> Ship:
        return cls(front, back, ship_type.length, ship_type.display_name)

    def __str__(self) -> str:
        return f"{self.name} from {self.front} to {self.back}"

    @property
    def sunk(self) -> bool:
        """True once every occupied cell has been hit."""
        return all(state is CellState.HIT for state in self.cells.values())

    def overlaps_or_touches(self, other: Ship) -> bool:
        """Return True if ``other`` lies on or next to any cell of this ship."""
        return not self.footprint.isdisjoint(other.area)

    def receive_shot(self, at: Coordinate) -> Outcome:
        """Mark ``at`` as hit; the caller must check ``at in ship.area`` first."""
        if at not in self.area:
            raise ValueError(f"{self} does not occupy {at}")
        self.cells[at] = CellState.HIT
        return Outcome.SUNK if self.sunk else Outcome.HIT
