"""Unit tests for src/chess/position.py"""

from dataclasses import FrozenInstanceError

import pytest

from src.chess.castling import CastlingRights
from src.chess.pieces import Piece
from src.chess.position import STARTING_PLACEMENT, Position, placement_from_fen, placement_to_fen
from src.chess.square import Square
from src.core.shared_types import Color, PieceType


def sq(algebraic: str) -> Square:
    return Square.from_algebraic(algebraic)


@pytest.mark.parametrize(
    "placement",
    [
        STARTING_PLACEMENT,
        "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1",
        "8/8/8/8/8/8/8/8",
        "k7/8/8/3Q4/8/8/8/7K",
    ],
)
def test_placement_roundtrip(placement: str) -> None:
    assert placement_to_fen(placement_from_fen(placement)) == placement


def test_placement_is_sparse() -> None:
    """Empty squares have no entry at all"""
    squares = placement_from_fen("k7/8/8/8/8/8/8/7K")
    assert squares == {
        sq("a8"): Piece(PieceType.KING, Color.BLACK),
        sq("h1"): Piece(PieceType.KING, Color.WHITE),
    }


def test_starting_position(start: Position) -> None:
    assert len(start.squares) == 32
    assert start.piece_at(sq("e1")) == Piece(PieceType.KING, Color.WHITE)
    assert start.piece_at(sq("d8")) == Piece(PieceType.QUEEN, Color.BLACK)
    assert start.is_empty(sq("e4"))
    assert start.active_color == Color.WHITE
    assert start.castling_rights == CastlingRights()
    assert start.en_passant_target is None
    assert start.half_move_clock == 0
    assert start.full_move_number == 1


def test_from_pieces_defaults_to_no_castling() -> None:
    position = Position.from_pieces({"e1": "K", "e8": "k"}, Color.BLACK)
    assert position.active_color == Color.BLACK
    assert position.castling_rights == CastlingRights.none()
    assert position.piece_at(sq("e8")) == Piece(PieceType.KING, Color.BLACK)


def test_locate(start: Position) -> None:
    assert start.locate_pieces(PieceType.KNIGHT, Color.WHITE) == [sq("b1"), sq("g1")]
    assert len(start.locate_color(Color.BLACK)) == 16


def test_positions_are_immutable(start: Position) -> None:
    with pytest.raises(FrozenInstanceError):
        start.active_color = Color.BLACK  # type: ignore[misc]


def test_with_squares_leaves_original_untouched(start: Position) -> None:
    squares = dict(start.squares)
    del squares[sq("e2")]
    changed = start.with_squares(squares, active_color=Color.BLACK)
    assert changed.is_empty(sq("e2"))
    assert changed.active_color == Color.BLACK
    assert not start.is_empty(sq("e2"))
    assert start.active_color == Color.WHITE


def test_repetition_key_ignores_move_counters(start: Position) -> None:
    later = start.with_squares(start.squares, half_move_clock=8, full_move_number=5)
    assert later.repetition_key() == start.repetition_key()
    assert later != start


@pytest.mark.parametrize(
    "changes",
    [
        {"active_color": Color.BLACK},
        {"castling_rights": CastlingRights.none()},
        {"en_passant_target": Square(5, 3)},
    ],
)
def test_repetition_key_includes_turn_rights_and_en_passant(start: Position, changes: dict) -> None:
    other = start.with_squares(start.squares, **changes)
    assert other.repetition_key() != start.repetition_key()


def test_positions_are_hashable(start: Position) -> None:
    assert len({start, Position.starting()}) == 1
