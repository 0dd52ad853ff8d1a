"""
Representation of a single position on the board. The part that can be encoded in a FEN string.

A Position is a value: it is never changed in place. The move applicator produces a new one for every ply,
so older positions stay valid for whoever still holds on to them (history replay, SAN generation).
"""

from dataclasses import dataclass, field, replace
from typing import Mapping, Optional, Self

from src.chess.castling import CastlingRights
from src.chess.pieces import Piece
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.shared_types import Color, PieceType

STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

# What makes two positions "the same" for the repetition rule: everything except the move counters
RepetitionKey = tuple[frozenset[tuple[Square, Piece]], Color, CastlingRights, Optional[Square]]


def placement_from_fen(fen_str: str) -> dict[Square, Piece]:
    """Construct the (sparse) square -> piece mapping from the first part of a FEN string.

    ex. standard starting position:
    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
    means:
    * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
    * pawns cover 7th rank entirely
    * ranks 6 through 3 have 8 consecutive empty squares
    * rank 2 are the white pawns (capital letters)
    * 1st rank are the white pieces. Again, left-to-right reads a1-h1.
    """
    squares: dict[Square, Piece] = {}
    for rank_idx, fen_one_rank in enumerate(fen_str.split("/")):
        # FEN string is read from top rank (8th) to bottom rank (1st)
        rank = BOARD_DIMENSIONS[1] - rank_idx
        # ... but the first character is the a-file, so reads in normal direction
        file = 1
        for character in fen_one_rank:
            if character.isalpha():
                squares[Square(file, rank)] = Piece.from_fen(character)
                file += 1
            else:
                # A number denotes the amount of empty squares after each other
                file += int(character)
    return squares


def placement_to_fen(squares: Mapping[Square, Piece]) -> str:
    """Ranks are separated by slashes in FEN string."""
    return "/".join(
        _rank_to_fen(squares, rank) for rank in range(BOARD_DIMENSIONS[1], 0, -1)
    )


def _rank_to_fen(squares: Mapping[Square, Piece], rank: int) -> str:
    """FEN string of a single rank"""
    fen_characters: list[str] = []
    empty_count = 0
    for file in range(1, BOARD_DIMENSIONS[0] + 1):
        piece = squares.get(Square(file, rank))
        if piece is None:
            empty_count += 1
            continue

        if empty_count > 0:
            fen_characters.append(str(empty_count))
            empty_count = 0
        fen_characters.append(piece.to_fen())

    # if the entire rank is empty, then we still place this number in the string
    if empty_count > 0:
        fen_characters.append(str(empty_count))
    return "".join(fen_characters)


@dataclass(frozen=True)
class Position:
    """
    Full description of a position.
    ----

    * squares: sparse mapping. A square without a key is empty.
    * active_color: whose turn it is
    * castling_rights: only ever revoked
    * en_passant_target: the square a pawn skipped over on the previous (double step) move. Valid for one move only.
    * half_move_clock: moves since the last pawn move or capture (50-move rule)
    * full_move_number: starts at 1 and increments after every move black makes.
    """

    squares: Mapping[Square, Piece] = field(default_factory=dict)
    active_color: Color = Color.WHITE
    castling_rights: CastlingRights = field(default_factory=CastlingRights)
    en_passant_target: Optional[Square] = None
    half_move_clock: int = 0
    full_move_number: int = 1

    @classmethod
    def starting(cls) -> Self:
        return cls(squares=placement_from_fen(STARTING_PLACEMENT))

    @classmethod
    def from_pieces(
        cls, pieces: Mapping[str, str], active_color: Color = Color.WHITE, **kwargs
    ) -> Self:
        """Convenience method to set up a position: {"e1": "K", "e8": "k"} (FEN letters keyed by algebraic square)"""
        squares = {
            Square.from_algebraic(square): Piece.from_fen(letter)
            for square, letter in pieces.items()
        }
        kwargs.setdefault("castling_rights", CastlingRights.none())
        return cls(squares=squares, active_color=active_color, **kwargs)

    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.squares.get(square)

    def is_empty(self, square: Square) -> bool:
        return square not in self.squares

    def locate_color(self, color: Color) -> list[Square]:
        return sorted(square for square, piece in self.squares.items() if piece.color == color)

    def locate_pieces(self, piece_type: PieceType, color: Color) -> list[Square]:
        target = Piece(piece_type, color)
        return sorted(square for square, piece in self.squares.items() if piece == target)

    def with_squares(self, squares: Mapping[Square, Piece], **changes) -> Self:
        """New position with the given placement (and any other fields changed)"""
        return replace(self, squares=squares, **changes)

    def repetition_key(self) -> RepetitionKey:
        """Identity of a position for the threefold repetition rule. The move counters are not part of it."""
        return (
            frozenset(self.squares.items()),
            self.active_color,
            self.castling_rights,
            self.en_passant_target,
        )

    def __hash__(self) -> int:
        return hash((self.repetition_key(), self.half_move_clock, self.full_move_number))
