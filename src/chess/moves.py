"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define, per piece type, which squares a piece could reach
when only looking at the geometry of the board (line of sight).

Legality (turn order, check-safety, castling, en passant) is decided in validation.py
"""

from dataclasses import dataclass, replace
from typing import Callable, Mapping, Optional, Protocol, Self

from src.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Piece
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.shared_types import Color, PieceType


class Board(Protocol):
    """Just the parts the movement strategies need"""

    @property
    def squares(self) -> Mapping[Square, Piece]: ...
    def piece_at(self, square: Square) -> Optional[Piece]: ...
    def is_empty(self, square: Square) -> bool: ...


Vector = tuple[int, int]

STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS
KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]


@dataclass(frozen=True)
class Move:
    """
    basic definition of a move to be made

    * promotion: only meaningful for a pawn reaching the last rank.
    * comment: annotation carried along for notation export. Not used by any of the rules.
    """

    from_square: Square
    to_square: Square
    promotion: Optional[PieceType] = None
    comment: Optional[str] = None

    @classmethod
    def from_algebraic(
        cls, from_sq: str, to_sq: str, promotion: Optional[PieceType] = None
    ) -> Self:
        return cls(Square.from_algebraic(from_sq), Square.from_algebraic(to_sq), promotion)

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "e1g1": the king castles king side
        """
        from_sq = Square.from_algebraic(uci[:2])
        to_sq = Square.from_algebraic(uci[2:4])
        promotion = FEN_TO_PIECE[uci[4].lower()] if len(uci) == 5 else None
        return cls(from_sq, to_sq, promotion)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promotion] if self.promotion else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def with_comment(self, comment: Optional[str]) -> Self:
        """Blank comments are dropped"""
        return replace(self, comment=comment.strip() if comment and comment.strip() else None)


# --- PAWN GEOMETRY ---
def pawn_direction(color: Color) -> int:
    """White moves UP the board, black moves DOWN"""
    return 1 if color == Color.WHITE else -1


def pawn_start_rank(color: Color) -> int:
    return 2 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 1


def promotion_rank(color: Color) -> int:
    return BOARD_DIMENSIONS[1] if color == Color.WHITE else 1


def en_passant_rank(color: Color) -> int:
    """The rank a pawn must stand on to take en passant (5th for white, 4th for black)"""
    return 5 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 4


# --- LINES ---
def is_straight_line(from_square: Square, to_square: Square) -> bool:
    """Same file or same rank (rook lines)"""
    return (from_square != to_square) and (
        from_square.file == to_square.file or from_square.rank == to_square.rank
    )


def is_diagonal_line(from_square: Square, to_square: Square) -> bool:
    """|delta_rank| = |delta_file| (bishop lines)"""
    df = to_square.file - from_square.file
    dr = to_square.rank - from_square.rank
    return df != 0 and abs(df) == abs(dr)


def squares_between(from_square: Square, to_square: Square) -> list[Square]:
    """
    Squares strictly in between two squares on a common line (straight or diagonal).
    Squares that do not share a line have nothing 'in between'.
    """
    if not (is_straight_line(from_square, to_square) or is_diagonal_line(from_square, to_square)):
        return []

    df = _sign(to_square.file - from_square.file)
    dr = _sign(to_square.rank - from_square.rank)
    between: list[Square] = []
    square = from_square.offset(df, dr)
    while square != to_square:
        between.append(square)
        square = square.offset(df, dr)
    return between


def is_path_clear(board: Board, from_square: Square, to_square: Square) -> bool:
    """Line of sight: every square strictly between from and to is empty"""
    return all(board.is_empty(square) for square in squares_between(from_square, to_square))


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _deltas(from_square: Square, to_square: Square) -> Vector:
    return to_square.file - from_square.file, to_square.rank - from_square.rank


# --- CAPTURING RULES / ATTACKING RULES ---
def pawn_attacks(board: Board, square: Square, piece: Piece, target: Square) -> bool:
    """
    Pawns take diagonally (one step forward). Unlike the other pieces, a pawn does NOT attack the squares it moves to.
    """
    df, dr = _deltas(square, target)
    return abs(df) == 1 and dr == pawn_direction(piece.color)


def knight_attacks(board: Board, square: Square, piece: Piece, target: Square) -> bool:
    """Knights always move such that |delta_rank| + |delta_file| = 3. They jump, so nothing can block them."""
    return _deltas(square, target) in KNIGHT_DELTAS


def bishop_attacks(board: Board, square: Square, piece: Piece, target: Square) -> bool:
    return is_diagonal_line(square, target) and is_path_clear(board, square, target)


def rook_attacks(board: Board, square: Square, piece: Piece, target: Square) -> bool:
    return is_straight_line(square, target) and is_path_clear(board, square, target)


def queen_attacks(board: Board, square: Square, piece: Piece, target: Square) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return bishop_attacks(board, square, piece, target) or rook_attacks(
        board, square, piece, target
    )


def king_attacks(board: Board, square: Square, piece: Piece, target: Square) -> bool:
    """The king attacks every adjacent square. Castling never attacks anything."""
    return _deltas(square, target) in KING_DELTAS


# --- STRATEGY PATTERN: ATTACKING RULES ---
AttackFn = Callable[[Board, Square, Piece, Square], bool]
ATTACK_RULES: dict[PieceType, AttackFn] = {
    PieceType.PAWN: pawn_attacks,
    PieceType.KNIGHT: knight_attacks,
    PieceType.BISHOP: bishop_attacks,
    PieceType.ROOK: rook_attacks,
    PieceType.QUEEN: queen_attacks,
    PieceType.KING: king_attacks,
}


def is_square_attacked(board: Board, target: Square, by_color: Color) -> bool:
    """
    Scan every piece of `by_color` and ask if it could reach the target square.
    ---

    Only the geometry and line of sight count here. Whether the attacker would leave its own king in check
    does not matter: a pinned piece still gives check.
    """
    return any(
        ATTACK_RULES[piece.type](board, square, piece, target)
        for square, piece in board.squares.items()
        if piece.color == by_color
    )


def find_king(board: Board, color: Color) -> Optional[Square]:
    king = Piece(PieceType.KING, color)
    return next((square for square, piece in board.squares.items() if piece == king), None)


def is_king_in_check(board: Board, color: Color) -> bool:
    """A position without a king of that color (only in set up test positions) is never in check."""
    king_square = find_king(board, color)
    if king_square is None:
        return False
    opponent_color = Color.BLACK if color == Color.WHITE else Color.WHITE
    return is_square_attacked(board, king_square, opponent_color)
