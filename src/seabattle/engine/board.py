"""Single-player board: ship placement and shot resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from seabattle.errors import PlacementError
from seabattle.telemetry import get_meter, get_tracer

from .coordinate import Coordinate
from .ship import Ship
from .states import CellState, Outcome

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.board")
meter = get_meter("seabattle.engine.board")

PLACEMENT_COUNTER = meter.create_counter(
    "seabattle_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "seabattle_engine_shots",
    unit="1",
    description="Shots received by a board",
)


@dataclass
class Board:
    """A player's 10×10 waters: the placed fleet and every recorded miss."""

    ships: list[Ship] = field(default_factory=list)
    misses: set[Coordinate] = field(default_factory=set)
    owner: str = "unknown"

    def place(self, ship: Ship) -> None:
        """Add ``ship``, refusing it if it overlaps or touches a placed ship."""
        with tracer.start_as_current_span("board.place") as span:
            span.set_attribute("ship.name", ship.name)
            span.set_attribute("ship.length", ship.length)
            span.set_attribute("ship.front", str(ship.front))
            span.set_attribute("ship.back", str(ship.back))
            span.set_attribute("board.owner", self.owner)
            blocking = next((existing for existing in self.ships if ship.overlaps_or_touches(existing)), None)
            if blocking is not None:
                PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
                logger.warning(
                    "ship_placement_failed",
                    extra={"owner": self.owner, "ship": str(ship), "blocked_by": str(blocking)},
                )
                raise PlacementError(
                    "You placed it too close to another one.",
                    f"{ship} touches {blocking}",
                )
            self.ships.append(ship)
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.info(
                "ship_placed",
                extra={
                    "owner": self.owner,
                    "ship_name": ship.name,
                    "front": str(ship.front),
                    "back": str(ship.back),
                },
            )

    def resolve_shot(self, at: Coordinate) -> Outcome:
        """Apply a shot at ``at`` and report what it did."""
        with tracer.start_as_current_span("board.resolve_shot") as span:
            span.set_attribute("shot.coordinate", str(at))
            span.set_attribute("board.owner", self.owner)
            target = next((ship for ship in self.ships if at in ship.area), None)
            if target is None:
                self.misses.add(at)
                outcome = Outcome.MISS
            else:
                outcome = target.receive_shot(at)
                if self.all_ships_sunk():
                    outcome = Outcome.WON

            span.set_attribute("shot.outcome", outcome.name)
            SHOT_COUNTER.add(1, attributes={"outcome": outcome.name.lower(), "owner": self.owner})
            logger.info(
                "shot_%s",
                outcome.name.lower(),
                extra={"coordinate": str(at), "owner": self.owner, "ship": str(target) if target else None},
            )
            return outcome

    def all_ships_sunk(self) -> bool:
        """Check whether the player has any surviving ships."""
        return all(ship.sunk for ship in self.ships)

    def cell_states(self, reveal: bool) -> dict[Coordinate, CellState]:
        """Project every known square; coordinates left out are fog."""
        states: dict[Coordinate, CellState] = {}
        for ship in self.ships:
            for coord, state in ship.cells.items():
                states[coord] = state.show(reveal)
        for coord in self.misses:
            states[coord] = CellState.MISS
        return states

    def cell_state(self, at: Coordinate, reveal: bool = False) -> CellState:
        """Return the displayed state of a single square."""
        return self.cell_states(reveal).get(at, CellState.UNKNOWN)
