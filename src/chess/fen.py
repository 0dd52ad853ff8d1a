"""
Reading / writing a Position as a FEN string (Forsyth-Edwards Notation).

Six space separated fields:

    <placement> <active color> <castling rights> <en passant square> <half move clock> <full move number>

ex) the standard starting position:
rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1

* placement: see `placement_from_fen()`
* active color: "w" or "b"
* castling rights: a subset of "KQkq" in that order (capitals for white), or "-" when none are left
* en passant square: the square a pawn skipped over on the last move, or "-"
* half move clock: plies since the last pawn move or capture
* full move number: starts at 1, goes up after every black move
"""

from itertools import combinations
from typing import Callable

from src.chess.castling import CastlingRights
from src.chess.pieces import FEN_TO_PIECE
from src.chess.position import Position, placement_from_fen, placement_to_fen
from src.chess.square import BOARD_DIMENSIONS, Square, is_algebraic_square
from src.core.exceptions import InvalidFENError
from src.core.shared_types import Color

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

COLOR_CODES = {"w": Color.WHITE, "b": Color.BLACK}

# "-" and every ordered subset of KQkq
VALID_CASTLING_ENCODINGS = ["-"] + [
    "".join(letters) for size in range(1, 5) for letters in combinations("KQkq", size)
]


def is_valid_position(position: str) -> bool:
    """Only the placement field: 8 ranks, each adding up to 8 files"""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    return len(rank_fens) == num_ranks and all(
        _rank_width(rank_fen) == num_files for rank_fen in rank_fens
    )


def _rank_width(rank_fen: str) -> int:
    """Number of files described by one rank. -1 for an unknown character."""
    width = 0
    for character in rank_fen:
        if character.isdigit():
            width += int(character)
        elif character.lower() in FEN_TO_PIECE:
            width += 1
        else:
            return -1
    return width


def is_valid_color_code(color: str) -> bool:
    return color in COLOR_CODES


def is_valid_castling_rights(castling: str) -> bool:
    return castling in VALID_CASTLING_ENCODINGS


def is_valid_en_passant(en_passant: str) -> bool:
    return en_passant == "-" or is_algebraic_square(en_passant)


def is_valid_move_counter(counter: str) -> bool:
    return counter.isdigit()


def _is_valid_move_number(counter: str) -> bool:
    return counter.isdigit() and int(counter) >= 1


# one check per field, in FEN order
FieldCheck = Callable[[str], bool]
FIELD_CHECKS: list[tuple[str, FieldCheck]] = [
    ("placement", is_valid_position),
    ("active color", is_valid_color_code),
    ("castling rights", is_valid_castling_rights),
    ("en passant square", is_valid_en_passant),
    ("half move clock", is_valid_move_counter),
    ("full move number", _is_valid_move_number),
]


def fen_errors(fen: str) -> list[str]:
    """Names of the fields that are not valid (empty for a valid FEN)"""
    parts = fen.split(" ")
    if len(parts) != len(FIELD_CHECKS):
        return [f"expected {len(FIELD_CHECKS)} fields, got {len(parts)}"]
    return [name for (name, check), part in zip(FIELD_CHECKS, parts) if not check(part)]


def is_valid_fen(fen: str) -> bool:
    return not fen_errors(fen)


def position_from_fen(fen: str) -> Position:
    """Raises InvalidFENError naming what is wrong with the string"""
    errors = fen_errors(fen)
    if errors:
        raise InvalidFENError(f"Cannot interpret {fen!r} as FEN: invalid {', '.join(errors)}")

    placement, color, castling, en_passant, half_moves, move_number = fen.split(" ")
    return Position(
        squares=placement_from_fen(placement),
        active_color=COLOR_CODES[color],
        castling_rights=CastlingRights.from_fen(castling),
        en_passant_target=None if en_passant == "-" else Square.from_algebraic(en_passant),
        half_move_clock=int(half_moves),
        full_move_number=int(move_number),
    )


def position_to_fen(position: Position) -> str:
    en_passant = position.en_passant_target
    fields = [
        placement_to_fen(position.squares),
        "w" if position.active_color == Color.WHITE else "b",
        position.castling_rights.to_fen(),
        en_passant.to_algebraic() if en_passant is not None else "-",
        str(position.half_move_clock),
        str(position.full_move_number),
    ]
    return " ".join(fields)
