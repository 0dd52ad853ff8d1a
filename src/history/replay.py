"""Rebuild board positions from a list of moves (positions are not stored in the history)."""

from typing import Optional, Sequence

from src.chess.applicator import apply_move
from src.chess.moves import Move
from src.chess.position import Position


def replay_positions(moves: Sequence[Move], start: Optional[Position] = None) -> list[Position]:
    """
    The start position followed by the position after every move: len(moves) + 1 entries.
    Raises IllegalMoveError if one of the moves cannot be played.
    """
    position = start if start is not None else Position.starting()
    positions = [position]
    for move in moves:
        position = apply_move(position, move)
        positions.append(position)
    return positions


def position_at(moves: Sequence[Move], index: int, start: Optional[Position] = None) -> Position:
    """Position after moves[0..index] (inclusive). Index -1 is the start position."""
    return replay_positions(moves[: index + 1], start)[-1]
