"""Match controller with per-match telemetry hooks."""

from __future__ import annotations

import time

from seabattle.engine.coordinate import Coordinate
from seabattle.engine.game import Match, MatchPhase, Player
from seabattle.engine.states import Outcome
from seabattle.errors import PlacementError
from seabattle.telemetry import get_logger, get_tracer, record_game_metric


class InstrumentedMatch(Match):
    """Wraps Match with a span per match, shot metrics, and completion logs."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._logger = get_logger("seabattle.engine")
        self._tracer = get_tracer("seabattle.engine")
        self._match_start_time: float | None = None
        self._shots = 0

    def run(self) -> Player:
        self._match_start_time = time.perf_counter()
        with self._tracer.start_as_current_span("seabattle.engine.match") as span:
            winner = super().run()
            span.set_attribute("winner", winner.label)
            span.set_attribute("shots", self._shots)
            return winner

    def setup_player(self, player: Player) -> None:
        with self._tracer.start_as_current_span("seabattle.engine.setup_player") as span:
            super().setup_player(player)
            span.set_attribute("player", player.label)
            span.set_attribute("ships", len(self.boards[player].ships))
            record_game_metric("seabattle_fleet_placed_total", 1, {"player": player.label})

    def fire(self, player: Player, at: Coordinate) -> Outcome:
        with self._tracer.start_as_current_span("seabattle.engine.fire") as span:
            span.set_attribute("player", player.label)
            span.set_attribute("coordinate", str(at))
            outcome = super().fire(player, at)
            self._shots += 1
            span.set_attribute("shot_outcome", outcome.name)

            record_game_metric("seabattle_shots_total", 1, {"player": player.label})
            record_game_metric(
                "seabattle_shots_by_outcome_total",
                1,
                {"player": player.label, "outcome": outcome.name.lower()},
            )
            self._logger.info("fire player=%s coordinate=%s outcome=%s", player.label, at, outcome.name)

            if self.phase is MatchPhase.FINISHED and self.winner:
                self._finish_match()
            return outcome

    def _report_error(self, exc: PlacementError) -> None:
        record_game_metric(
            "seabattle_invalid_commands_total",
            1,
            {"player": self.current_player.label, "phase": self.phase.value},
        )
        super()._report_error(exc)

    def _finish_match(self) -> None:
        duration = (time.perf_counter() - self._match_start_time) if self._match_start_time else 0.0
        winner = self.winner.label if self.winner else "unknown"

        record_game_metric("seabattle_match_completed_total", 1, {"winner": winner})
        record_game_metric("seabattle_match_duration_seconds", duration, {"winner": winner})

        with self._tracer.start_as_current_span("seabattle.engine.match_complete") as span:
            span.set_attribute("winner", winner)
            span.set_attribute("shots", self._shots)
            span.set_attribute("duration_ms", duration * 1000)

        self._logger.info("Match finished. Winner=%s shots=%d duration_s=%.3f", winner, self._shots, duration)
