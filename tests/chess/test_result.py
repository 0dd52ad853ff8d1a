"""Unit tests for src/chess/result.py"""

import pytest

from src.chess.applicator import apply_move
from src.chess.fen import position_from_fen
from src.chess.moves import Move
from src.chess.position import Position
from src.chess.result import (
    Checkmate,
    Draw,
    Ongoing,
    Resignation,
    Stalemate,
    evaluate_position,
    is_game_over,
    winner_of,
)
from src.chess.validation import Valid, validate_move
from src.core.shared_types import Color, DrawReason


def test_start_position_is_ongoing(start: Position) -> None:
    assert evaluate_position(start) == Ongoing()
    assert evaluate_position(start, []) == Ongoing()


def test_queen_mate_in_the_corner() -> None:
    position = Position.from_pieces({"a1": "K", "b3": "q", "c3": "k"}, Color.BLACK)
    move = Move.from_uci("b3b2")
    assert validate_move(position, move) == Valid()
    assert evaluate_position(apply_move(position, move)) == Checkmate(winner=Color.BLACK)


def test_fools_mate() -> None:
    position = Position.starting()
    for uci in ["f2f3", "e7e5", "g2g4", "d8h4"]:
        position = apply_move(position, Move.from_uci(uci))
    assert evaluate_position(position) == Checkmate(winner=Color.BLACK)


def test_check_is_not_mate() -> None:
    position = position_from_fen("4k3/8/8/8/8/8/8/r3K3 w - - 0 1")
    assert evaluate_position(position) == Ongoing()


def test_stalemate() -> None:
    position = Position.from_pieces({"a8": "K", "c7": "k", "b7": "r"})
    assert evaluate_position(position) == Stalemate()


def test_fifty_move_rule() -> None:
    position = position_from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 50 80")
    assert evaluate_position(position) == Draw(DrawReason.FIFTY_MOVE_RULE)


def test_forty_nine_moves_is_not_enough() -> None:
    position = position_from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 49 80")
    assert evaluate_position(position) == Ongoing()


def test_checkmate_beats_fifty_move_rule() -> None:
    position = position_from_fen("8/8/8/8/8/2k5/1q6/K7 w - - 75 120")
    assert evaluate_position(position) == Checkmate(winner=Color.BLACK)


def test_threefold_repetition_from_history() -> None:
    position = position_from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    later = position_from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 4 3")
    assert evaluate_position(later, [position, position]) == Draw(DrawReason.THREEFOLD_REPETITION)


def test_twofold_is_not_a_draw() -> None:
    position = position_from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    assert evaluate_position(position, [position]) == Ongoing()


@pytest.mark.parametrize(
    "other",
    [
        "4k3/8/8/8/8/8/8/R3K3 b - - 0 1",  # other color to move
        "4k3/8/8/8/8/8/8/R3K3 w Q - 0 1",  # other castling rights
        "4k3/8/8/8/8/8/8/R4K2 w - - 0 1",  # other placement
    ],
)
def test_repetition_needs_identical_positions(other: str) -> None:
    position = position_from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    different = position_from_fen(other)
    assert evaluate_position(position, [different, different]) == Ongoing()


def test_repetition_by_knight_shuffle(start: Position) -> None:
    positions = [start]
    for uci in ["g1f3", "g8f6", "f3g1", "f6g8"] * 2:
        positions.append(apply_move(positions[-1], Move.from_uci(uci)))

    # the start position is back for the third time
    assert evaluate_position(positions[-1], positions[:-1]) == Draw(DrawReason.THREEFOLD_REPETITION)
    assert evaluate_position(positions[4], positions[:4]) == Ongoing()


def test_game_over_and_winner() -> None:
    assert not is_game_over(Ongoing())
    assert is_game_over(Stalemate())
    assert winner_of(Checkmate(Color.WHITE)) == Color.WHITE
    assert winner_of(Resignation(Color.BLACK)) == Color.BLACK
    assert winner_of(Draw(DrawReason.AGREED)) is None
    assert winner_of(Ongoing()) is None
