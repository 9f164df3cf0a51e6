"""Command-line driver for a hot-seat SeaBattle match between two players."""

from __future__ import annotations

import argparse
from collections.abc import Iterator, Sequence
from itertools import groupby
from operator import attrgetter
from pathlib import Path

from opentelemetry.instrumentation.logging import LoggingInstrumentor

from seabattle.config import MatchConfig
from seabattle.engine.board import Board
from seabattle.engine.coordinate import COLUMNS, Coordinate
from seabattle.engine.game import Match
from seabattle.engine.instrumented_game import InstrumentedMatch
from seabattle.engine.states import CellState
from seabattle.errors import InputExhaustedError
from seabattle.telemetry import configure_console_logging, init_telemetry, load_telemetry_config


def format_board(board: Board, reveal: bool) -> str:
    states = board.cell_states(reveal)
    rows = ["  " + " ".join(str(col) for col in COLUMNS)]
    for row, squares in groupby(Coordinate.grid(), key=attrgetter("row")):
        symbols = (states.get(square, CellState.UNKNOWN).symbol for square in squares)
        rows.append(f"{row} " + " ".join(symbols))
    return "\n".join(rows)


class ConsoleOutput:
    """Prints the match to stdout."""

    def show_board(self, board: Board, reveal: bool) -> None:
        print()
        print(format_board(board, reveal))

    def announce(self, message: str) -> None:
        print()
        print(message)

    def hand_over(self) -> None:
        print("Press Enter and pass the move to another player")
        print("***")


def _stdin_commands() -> Iterator[str]:
    while True:
        try:
            yield input()
        except EOFError:
            return


def _script_commands(path: Path) -> Iterator[str]:
    """Yield one command per non-blank line; ``#`` starts a comment line."""
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            yield stripped


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play SeaBattle with two players at one keyboard.")
    parser.add_argument(
        "--script",
        type=Path,
        default=None,
        help="Read commands from this file (one per line) instead of stdin.",
    )
    parser.add_argument(
        "--echo",
        action="store_true",
        default=None,
        help="Echo every command and the debug detail of rejected ones.",
    )
    parser.add_argument(
        "--pause",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Wait for Enter when passing the device (default: on for stdin, off for scripts).",
    )
    parser.add_argument("--log-level", default=None, help="Engine log level written to stderr.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    pause = args.pause
    if pause is None and args.script is not None:
        pause = False
    config = MatchConfig.from_env(
        echo_commands=args.echo,
        pause_between_turns=pause,
        log_level=args.log_level,
    )
    configure_console_logging(config.log_level)
    telemetry = init_telemetry(load_telemetry_config())
    if telemetry.enabled:
        LoggingInstrumentor().instrument()

    commands = _script_commands(args.script) if args.script else _stdin_commands()
    match_cls = InstrumentedMatch if telemetry.enabled else Match
    match = match_cls(commands, ConsoleOutput(), config)
    try:
        winner = match.run()
    except InputExhaustedError as exc:
        print()
        print(f"No more input: {exc}")
        return 1
    except KeyboardInterrupt:
        print("\nGoodbye!")
        return 130

    print()
    print(f"{winner.label} wins!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
