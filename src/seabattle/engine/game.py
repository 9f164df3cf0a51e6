"""Two-player match controller: fleet setup, alternating turns, win detection."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from seabattle.config import MatchConfig
from seabattle.errors import InputExhaustedError, PlacementError
from seabattle.telemetry import get_meter, get_tracer

from .board import Board
from .coordinate import Coordinate, parse_placement
from .ship import FLEET, Ship, ShipType
from .states import CellState, Outcome

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.game")
meter = get_meter("seabattle.engine.game")

MOVE_COUNTER = meter.create_counter(
    "seabattle_engine_moves",
    unit="1",
    description="Number of shots fired in a Match",
)

DIVIDER = "-" * 21


class MatchPhase(Enum):
    """High-level lifecycle of a match."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class Player(Enum):
    """The two seats at the table."""

    PLAYER1 = 1
    PLAYER2 = 2

    def opponent(self) -> Player:
        """Return the opposing player."""
        return Player.PLAYER2 if self is Player.PLAYER1 else Player.PLAYER1

    @property
    def label(self) -> str:
        return f"Player {self.value}"


class MatchOutput(Protocol):
    """Where the match sends everything the players should see."""

    def show_board(self, board: Board, reveal: bool) -> None:
        ...

    def announce(self, message: str) -> None:
        ...

    def hand_over(self) -> None:
        ...


@dataclass(frozen=True)
class MatchState:
    """Immutable snapshot of the current match."""

    phase: MatchPhase
    current_player: Player
    winner: Player | None
    boards: dict[Player, dict[Coordinate, CellState]]


class Match:
    """Drives two boards through setup and play from a feed of text commands.

    ``current_player`` is the player being set up during ``SETUP`` and the
    shooter during ``IN_PROGRESS``; it only flips after a placement phase
    completes or a shot that does not end the match.
    """

    def __init__(
        self,
        commands: Iterable[str],
        output: MatchOutput,
        config: MatchConfig | None = None,
    ) -> None:
        self.boards: dict[Player, Board] = {player: Board(owner=player.label) for player in Player}
        self.phase: MatchPhase = MatchPhase.SETUP
        self.current_player: Player = Player.PLAYER1
        self.winner: Player | None = None
        self.config = config or MatchConfig()
        self._commands = iter(commands)
        self._output = output
        self._retrying = False

    def run(self) -> Player:
        """Play a whole match and return the winner."""
        for player in Player:
            self.setup_player(player)
            self.hand_over()
        self.play()
        if self.winner is None:
            raise RuntimeError("Match ended without a winner.")
        return self.winner

    def setup_player(self, player: Player) -> None:
        """Read and place the full fleet for ``player``."""
        if self.phase is not MatchPhase.SETUP or player is not self.current_player:
            raise RuntimeError(f"{player.label} cannot place ships now.")

        with tracer.start_as_current_span("match.setup_player") as span:
            span.set_attribute("player", player.label)
            board = self.boards[player]
            self._output.announce(f"{player.label}, place your ships on the game field")
            self._output.show_board(board, reveal=False)
            for ship_type in FLEET:
                self._place_ship(board, ship_type)

            if player is Player.PLAYER1:
                self.current_player = Player.PLAYER2
            else:
                self.phase = MatchPhase.IN_PROGRESS
                self.current_player = Player.PLAYER1
            logger.info(
                "fleet_placed",
                extra={"player": player.label, "ships": len(board.ships), "phase": self.phase.value},
            )

    def play(self) -> None:
        """Take turns until one board loses its last ship."""
        while self.phase is MatchPhase.IN_PROGRESS:
            self.take_turn()

    def take_turn(self) -> Outcome | None:
        """Read one shot for the current player; ``None`` if it was rejected."""
        player = self.current_player
        self._output.show_board(self.boards[player.opponent()], reveal=False)
        self._output.announce(DIVIDER)
        self._output.show_board(self.boards[player], reveal=True)
        if not self._retrying:
            self._output.announce(f"{player.label}, it's your turn:")

        command = self._next_command()
        try:
            target = Coordinate.from_text(command)
        except PlacementError as exc:
            self._retrying = True
            self._report_error(exc)
            return None

        self._retrying = False
        outcome = self.fire(player, target)
        self._output.announce(str(outcome))
        if outcome is not Outcome.WON:
            self.hand_over()
        return outcome

    def fire(self, player: Player, at: Coordinate) -> Outcome:
        """Resolve ``player``'s shot at the opponent's board, enforcing turn order."""
        with tracer.start_as_current_span("match.fire") as span:
            span.set_attribute("player", player.label)
            span.set_attribute("coordinate", str(at))
            if self.phase is not MatchPhase.IN_PROGRESS:
                logger.error(
                    "shot_rejected_match_not_in_progress",
                    extra={"player": player.label, "phase": self.phase.value},
                )
                raise RuntimeError("Match is not in progress.")
            if player is not self.current_player:
                logger.error(
                    "shot_rejected_wrong_player",
                    extra={"player": player.label, "current": self.current_player.label},
                )
                raise RuntimeError("It is not this player's turn.")

            outcome = self.boards[player.opponent()].resolve_shot(at)
            if outcome is Outcome.WON:
                self.winner = player
                self.phase = MatchPhase.FINISHED
                span.set_attribute("match.winner", player.label)
                logger.info("match_finished", extra={"winner": player.label})
            else:
                self.current_player = player.opponent()
                span.set_attribute("next_player", self.current_player.label)

            MOVE_COUNTER.add(1, attributes={"outcome": outcome.name.lower(), "player": player.label})
            return outcome

    def hand_over(self) -> None:
        """Pass the device to the other player, waiting for Enter if configured."""
        self._output.hand_over()
        if self.config.pause_between_turns:
            self._next_command()

    def get_state(self) -> MatchState:
        """Return an immutable view of the match with both fleets revealed."""
        return MatchState(
            phase=self.phase,
            current_player=self.current_player,
            winner=self.winner,
            boards={player: board.cell_states(reveal=True) for player, board in self.boards.items()},
        )

    def _place_ship(self, board: Board, ship_type: ShipType) -> Ship:
        self._output.announce(
            f"Enter the coordinates of the {ship_type.display_name} ({ship_type.length} cells):"
        )
        while True:
            command = self._next_command()
            try:
                front, back = parse_placement(command)
                ship = Ship.of_type(ship_type, front, back)
                board.place(ship)
            except PlacementError as exc:
                self._report_error(exc)
                continue
            self._output.show_board(board, reveal=True)
            return ship

    def _next_command(self) -> str:
        try:
            command = next(self._commands).strip()
        except StopIteration:
            logger.error("command_feed_exhausted", extra={"phase": self.phase.value})
            raise InputExhaustedError(
                f"Ran out of input during {self.phase.value} ({self.current_player.label})."
            ) from None
        logger.debug("command_received", extra={"command": command, "phase": self.phase.value})
        if self.config.echo_commands:
            self._output.announce(f"> {command}")
        return command

    def _report_error(self, exc: PlacementError) -> None:
        logger.info("command_rejected", extra={"error": exc.message, "debug": exc.debug})
        self._output.announce(f"Error! {exc} Try again:")
        if self.config.echo_commands:
            self._output.announce(f"> {exc.debug}")
