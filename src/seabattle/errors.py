"""Exceptions raised by the SeaBattle engine."""

from __future__ import annotations


class PlacementError(Exception):
    """A rejected command: bad coordinate text or an illegal ship placement.

    ``str(error)`` is the message shown to the player; ``debug`` carries the
    detail needed to understand what was actually received.
    """

    def __init__(self, message: str, debug: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.debug = debug if debug is not None else message

    def __str__(self) -> str:
        return self.message


class InputExhaustedError(Exception):
    """The command feed ran out before the match was over."""
