"""
Castling rules: the squares king and rook use per direction, and the rights a position still has.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Self

from src.chess.square import Square
from src.core.shared_types import Color


class CastlingDirection(Enum):
    """The four castling directions. Values represent their encodings in FEN string."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK

    @property
    def is_king_side(self) -> bool:
        return self.value.lower() == "k"


CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


@dataclass(frozen=True)
class CastlingSquares:
    """Start and end squares of king and rook. While the right is kept, both still stand on their start squares."""

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def castling_directions(color: Color) -> list[CastlingDirection]:
    return [direction for direction in CASTLING_ORDER if direction.color == color]


def castling_direction_for_king_move(
    color: Color, king_from: Square, king_to: Square
) -> Optional[CastlingDirection]:
    """Which castling direction (if any) a king move of the given color corresponds to."""
    return next(
        (
            direction
            for direction in castling_directions(color)
            if CASTLING_RULES[direction].king_from == king_from
            and CASTLING_RULES[direction].king_to == king_to
        ),
        None,
    )


def castling_direction_for_rook_square(square: Square) -> Optional[CastlingDirection]:
    """The castling right tied to a rook standing on its starting square (a1, h1, a8 or h8)."""
    return next(
        (
            direction
            for direction, rule in CASTLING_RULES.items()
            if rule.rook_from == square
        ),
        None,
    )


def squares_between_on_rank(from_square: Square, to_square: Square) -> list[Square]:
    """Files strictly between two squares of one rank, walking from `from_square` towards `to_square`"""
    if from_square.rank != to_square.rank:
        raise ValueError(
            f"{from_square} and {to_square} are not on the same rank"
        )

    step = 1 if to_square.file > from_square.file else -1
    return [
        Square(file, from_square.rank)
        for file in range(from_square.file + step, to_square.file, step)
    ]


def castling_path(direction: CastlingDirection) -> list[Square]:
    """Squares that must be empty: everything strictly between king and rook, plus the king's destination."""
    rule = CASTLING_RULES[direction]
    path = squares_between_on_rank(rule.king_from, rule.rook_from)
    if rule.king_to not in path:
        path.append(rule.king_to)
    return path


@dataclass(frozen=True)
class CastlingRights:
    """
    Rights will be revoked during the game, never regained.
    Revoking returns a new value, the current one is left as is.
    """

    white_king_side: bool = True
    white_queen_side: bool = True
    black_king_side: bool = True
    black_queen_side: bool = True

    @classmethod
    def none(cls) -> Self:
        return cls(False, False, False, False)

    def has_right(self, direction: CastlingDirection) -> bool:
        return getattr(self, _FIELD_NAMES[direction])

    def can_castle(self, color: Color) -> bool:
        return any(self.has_right(direction) for direction in castling_directions(color))

    def revoke(self, direction: CastlingDirection) -> Self:
        return replace(self, **{_FIELD_NAMES[direction]: False})

    def revoke_all(self, color: Color) -> Self:
        rights = self
        for direction in castling_directions(color):
            rights = rights.revoke(direction)
        return rights

    @classmethod
    def from_fen(cls, castle_fen: str) -> Self:
        """From the castling field of a FEN string ("KQkq", "Kq", "-", ...)"""
        return cls(
            **{
                _FIELD_NAMES[direction]: (direction.value in castle_fen)
                for direction in CastlingDirection
            }
        )

    def to_fen(self) -> str:
        """Letters in KQkq order, "-" when no right is left"""
        castling_chars = "".join(
            [direction.value for direction in CASTLING_ORDER if self.has_right(direction)]
        )
        return castling_chars or "-"


_FIELD_NAMES: dict[CastlingDirection, str] = {
    CastlingDirection.WHITE_KING_SIDE: "white_king_side",
    CastlingDirection.WHITE_QUEEN_SIDE: "white_queen_side",
    CastlingDirection.BLACK_KING_SIDE: "black_king_side",
    CastlingDirection.BLACK_QUEEN_SIDE: "black_queen_side",
}
