"""SAN (Standard Algebraic Notation) conversion and parsing."""

import re
from typing import Optional

from src.chess.applicator import apply_move
from src.chess.legal_moves import legal_moves
from src.chess.moves import Move, is_king_in_check, pawn_direction, promotion_rank
from src.chess.pieces import PIECE_TO_SAN, SAN_TO_PIECE, Piece
from src.chess.position import Position
from src.chess.result import Checkmate, evaluate_position
from src.chess.square import Square
from src.chess.validation import validate_move
from src.core.exceptions import IllegalMoveError
from src.core.shared_types import Color, PieceType

KING_SIDE_CASTLING = "O-O"
QUEEN_SIDE_CASTLING = "O-O-O"

_SAN_RE = re.compile(
    r"^(?P<piece>[NBRQK])?"
    r"(?P<from_file>[a-h])?(?P<from_rank>[1-8])?"
    r"(?P<capture>x)?"
    r"(?P<to>[a-h][1-8])"
    r"(?:=?(?P<promotion>[NBRQ]))?$"
)
_CASTLING_TOKENS: dict[str, bool] = {
    "O-O": True,
    "0-0": True,
    "O-O-O": False,
    "0-0-0": False,
}


def move_to_san(position: Position, move: Move) -> str:
    """
    Convert a *move* to SAN given the *position* before the move.

    <piece letter><disambiguation><x if capture><destination><=promotion><+ or #>
    """
    piece = position.piece_at(move.from_square)
    if piece is None:
        raise IllegalMoveError(f"No piece at source square: {move.from_square}")

    if _is_castling(piece, move):
        san = (
            KING_SIDE_CASTLING
            if move.to_square.file > move.from_square.file
            else QUEEN_SIDE_CASTLING
        )
    elif piece.type == PieceType.PAWN:
        san = _pawn_san(position, move, piece)
    else:
        san = _piece_san(position, move, piece)

    return san + _check_suffix(position, move)


def _is_castling(piece: Piece, move: Move) -> bool:
    return (
        piece.type == PieceType.KING
        and move.from_square.rank == move.to_square.rank
        and abs(move.to_square.file - move.from_square.file) == 2
    )


def _is_capture(position: Position, move: Move, piece: Piece) -> bool:
    target = position.piece_at(move.to_square)
    if target is not None and target.color != piece.color:
        return True
    # en passant: the target square itself is empty
    return (
        piece.type == PieceType.PAWN
        and position.en_passant_target == move.to_square
        and move.from_square.file != move.to_square.file
    )


def _pawn_san(position: Position, move: Move, piece: Piece) -> str:
    """Pawns have no letter. On a capture the file they came from is the disambiguation."""
    san = move.to_square.to_algebraic()
    if _is_capture(position, move, piece):
        san = f"{_file_letter(move.from_square)}x{san}"

    if move.promotion is not None and move.to_square.rank == promotion_rank(piece.color):
        san += f"={PIECE_TO_SAN[move.promotion]}"
    return san


def _piece_san(position: Position, move: Move, piece: Piece) -> str:
    capture = "x" if _is_capture(position, move, piece) else ""
    return (
        f"{PIECE_TO_SAN[piece.type]}{disambiguation(position, move, piece)}"
        f"{capture}{move.to_square.to_algebraic()}"
    )


def disambiguation(position: Position, move: Move, piece: Piece) -> str:
    """
    Other pieces of the same type and color that could legally move to the same square?
    ----

    * none: nothing needed
    * otherwise the file, if none of the others stands on the same file
    * otherwise the rank, if none of the others stands on the same rank
    * otherwise the full square
    """
    rivals = [
        square
        for square in position.locate_pieces(piece.type, piece.color)
        if square != move.from_square and move.to_square in legal_moves(position, square)
    ]
    if not rivals:
        return ""

    if all(square.file != move.from_square.file for square in rivals):
        return _file_letter(move.from_square)

    if all(square.rank != move.from_square.rank for square in rivals):
        return str(move.from_square.rank)

    return move.from_square.to_algebraic()


def _check_suffix(position: Position, move: Move) -> str:
    """'+' for check, '#' for checkmate. If the move cannot be played in this position, no suffix at all."""
    try:
        after = apply_move(position, move)
    except IllegalMoveError:
        return ""

    if not is_king_in_check(after, after.active_color):
        return ""
    return "#" if isinstance(evaluate_position(after), Checkmate) else "+"


def _file_letter(square: Square) -> str:
    return square.to_algebraic()[0]


# --- PARSING ---
def san_to_move(position: Position, san: str) -> Optional[Move]:
    """
    Resolve a SAN token against the *position*.

    Returns None when the token cannot be read, matches no legal move, or is ambiguous.
    """
    clean = san.strip().rstrip("+#!?")

    if clean in _CASTLING_TOKENS:
        return _castling_move(position, king_side=_CASTLING_TOKENS[clean])

    match = _SAN_RE.match(clean)
    if match is None:
        return None

    to_square = Square.from_algebraic(match["to"])
    promotion = SAN_TO_PIECE[match["promotion"]] if match["promotion"] else None
    from_file = _file_number(match["from_file"]) if match["from_file"] else None
    from_rank = int(match["from_rank"]) if match["from_rank"] else None

    if match["piece"]:
        from_square = _find_piece_origin(
            position, SAN_TO_PIECE[match["piece"]], to_square, from_file, from_rank
        )
    else:
        from_square = _find_pawn_origin(
            position, to_square, from_file, is_capture=bool(match["capture"])
        )

    if from_square is None:
        return None

    move = Move(from_square, to_square, promotion)
    return move if validate_move(position, move).is_valid else None


def _castling_move(position: Position, king_side: bool) -> Optional[Move]:
    home_rank = 1 if position.active_color == Color.WHITE else 8
    king_from = Square(5, home_rank)
    king_to = Square(7 if king_side else 3, home_rank)
    move = Move(king_from, king_to)
    return move if validate_move(position, move).is_valid else None


def _find_piece_origin(
    position: Position,
    piece_type: PieceType,
    to_square: Square,
    from_file: Optional[int],
    from_rank: Optional[int],
) -> Optional[Square]:
    """Search all pieces of this type (of the player to move) that can legally reach the destination."""
    candidates = [
        square
        for square in position.locate_pieces(piece_type, position.active_color)
        if (from_file is None or square.file == from_file)
        and (from_rank is None or square.rank == from_rank)
        and to_square in legal_moves(position, square)
    ]
    return candidates[0] if len(candidates) == 1 else None


def _find_pawn_origin(
    position: Position, to_square: Square, from_file: Optional[int], is_capture: bool
) -> Optional[Square]:
    """
    The file comes from the token (the letter before the 'x', or else the destination file).
    The rank follows from the direction the pawn moves in: one step back, or two for a double step.
    If that does not give a pawn of ours, scan the whole file.
    """
    color = position.active_color
    own_pawn = Piece(PieceType.PAWN, color)
    file = from_file if from_file is not None else to_square.file
    direction = pawn_direction(color)

    steps_back = [1] if is_capture else [1, 2]
    for steps in steps_back:
        square = Square(file, to_square.rank - steps * direction)
        if square.is_within_bounds() and position.piece_at(square) == own_pawn:
            if to_square in legal_moves(position, square):
                return square

    # fallback: any pawn of ours on that file that can get there
    candidates = [
        square
        for square in position.locate_pieces(PieceType.PAWN, color)
        if square.file == file and to_square in legal_moves(position, square)
    ]
    return candidates[0] if len(candidates) == 1 else None


def _file_number(letter: str) -> int:
    return ord(letter) - ord("a") + 1
