"""Unit tests for src/notation/san.py"""

import pytest

from src.chess.applicator import apply_move
from src.chess.fen import position_from_fen
from src.chess.legal_moves import all_legal_moves
from src.chess.moves import Move
from src.chess.position import Position
from src.core.exceptions import IllegalMoveError
from src.core.shared_types import Color, PieceType
from src.notation.san import move_to_san, san_to_move

CASTLING_READY = "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1"
TWO_ROOKS_ON_A_RANK = {"a1": "R", "h1": "R", "e3": "K", "g8": "k"}
TWO_ROOKS_ON_A_FILE = {"a1": "R", "a5": "R", "g2": "K", "h8": "k"}
THREE_QUEENS = {"a1": "Q", "c1": "Q", "a3": "Q", "e7": "K", "h5": "k"}


def play(position: Position, *uci_moves: str) -> Position:
    for uci in uci_moves:
        position = apply_move(position, Move.from_uci(uci))
    return position


# --- ENCODING ---
@pytest.mark.parametrize(
    "uci, san",
    [("e2e3", "e3"), ("e2e4", "e4"), ("g1f3", "Nf3"), ("b1c3", "Nc3")],
)
def test_opening_moves(start: Position, uci: str, san: str) -> None:
    assert move_to_san(start, Move.from_uci(uci)) == san


def test_pawn_capture() -> None:
    position = play(Position.starting(), "e2e4", "d7d5")
    assert move_to_san(position, Move.from_uci("e4d5")) == "exd5"


def test_piece_capture() -> None:
    position = position_from_fen("4k3/8/8/3p4/8/2N5/8/4K3 w - - 0 1")
    assert move_to_san(position, Move.from_uci("c3d5")) == "Nxd5"


def test_en_passant_is_a_capture() -> None:
    position = play(Position.starting(), "e2e4", "a7a6", "e4e5", "d7d5")
    assert move_to_san(position, Move.from_uci("e5d6")) == "exd6"


@pytest.mark.parametrize(
    "fen, uci, san",
    [
        (CASTLING_READY, "e1g1", "O-O"),
        (CASTLING_READY, "e1c1", "O-O-O"),
        (CASTLING_READY.replace(" w ", " b "), "e8g8", "O-O"),
        (CASTLING_READY.replace(" w ", " b "), "e8c8", "O-O-O"),
    ],
)
def test_castling(fen: str, uci: str, san: str) -> None:
    assert move_to_san(position_from_fen(fen), Move.from_uci(uci)) == san


def test_promotion_suffix() -> None:
    position = Position.from_pieces({"b7": "P", "e1": "K", "h1": "k"})
    assert move_to_san(position, Move.from_algebraic("b7", "b8", PieceType.KNIGHT)) == "b8=N"


def test_capture_promotion_with_check() -> None:
    position = Position.from_pieces({"b7": "P", "a8": "r", "e1": "K", "h8": "k"})
    assert move_to_san(position, Move.from_algebraic("b7", "a8", PieceType.QUEEN)) == "bxa8=Q+"


def test_no_suffix_without_chosen_promotion() -> None:
    position = Position.from_pieces({"b7": "P", "e1": "K", "h1": "k"})
    assert move_to_san(position, Move.from_uci("b7b8")) == "b8"


def test_check_suffix() -> None:
    position = play(Position.starting(), "e2e4", "f7f6")
    assert move_to_san(position, Move.from_uci("d1h5")) == "Qh5+"


def test_checkmate_suffix() -> None:
    position = Position.from_pieces({"a1": "K", "b3": "q", "c3": "k"}, Color.BLACK)
    assert move_to_san(position, Move.from_uci("b3b2")) == "Qb2#"


def test_fools_mate() -> None:
    position = play(Position.starting(), "f2f3", "e7e5", "g2g4")
    assert move_to_san(position, Move.from_uci("d8h4")) == "Qh4#"


@pytest.mark.parametrize(
    "pieces, uci, san",
    [
        (TWO_ROOKS_ON_A_RANK, "a1d1", "Rad1"),
        (TWO_ROOKS_ON_A_RANK, "h1d1", "Rhd1"),
        (TWO_ROOKS_ON_A_FILE, "a1a3", "R1a3"),
        (TWO_ROOKS_ON_A_FILE, "a5a3", "R5a3"),
        (TWO_ROOKS_ON_A_FILE, "a1b1", "Rb1"),  # the other rook cannot get there
        (THREE_QUEENS, "a1b2", "Qa1b2"),
    ],
)
def test_disambiguation(pieces: dict[str, str], uci: str, san: str) -> None:
    assert move_to_san(Position.from_pieces(pieces), Move.from_uci(uci)) == san


def test_pinned_piece_does_not_need_disambiguation() -> None:
    """The knight on e2 could jump to c3 as well, but it is pinned"""
    position = Position.from_pieces({"e1": "K", "e2": "N", "a4": "N", "e8": "r", "h8": "k"})
    assert move_to_san(position, Move.from_uci("a4c3")) == "Nc3"


def test_knights_disambiguated_by_file(start: Position) -> None:
    position = play(start, "g1f3", "a7a6", "b1c3", "a6a5", "c3b5", "a5a4")
    # both the knight on b5 and the one on f3 can reach d4
    assert move_to_san(position, Move.from_uci("f3d4")) == "Nfd4"


def test_illegal_move_has_no_suffix(start: Position) -> None:
    """A move that cannot be applied still gets written, only without check suffix"""
    assert move_to_san(start, Move.from_uci("e2e5")) == "e5"


def test_empty_source_square_raises(start: Position) -> None:
    with pytest.raises(IllegalMoveError):
        move_to_san(start, Move.from_uci("e4e5"))


# --- DECODING ---
@pytest.mark.parametrize(
    "san, uci",
    [("e4", "e2e4"), ("e3", "e2e3"), ("Nf3", "g1f3"), ("Nc3", "b1c3"), ("Nf3+", "g1f3"), ("d4!?", "d2d4")],
)
def test_resolve_opening_moves(start: Position, san: str, uci: str) -> None:
    assert san_to_move(start, san) == Move.from_uci(uci)


def test_resolve_black_pawn(start: Position) -> None:
    position = play(start, "e2e4")
    assert san_to_move(position, "e5") == Move.from_uci("e7e5")
    assert san_to_move(position, "c6") == Move.from_uci("c7c6")


def test_resolve_pawn_capture() -> None:
    position = play(Position.starting(), "e2e4", "d7d5")
    assert san_to_move(position, "exd5") == Move.from_uci("e4d5")


def test_resolve_en_passant() -> None:
    position = play(Position.starting(), "e2e4", "a7a6", "e4e5", "d7d5")
    assert san_to_move(position, "exd6") == Move.from_uci("e5d6")


@pytest.mark.parametrize("token, uci", [("O-O", "e1g1"), ("O-O-O", "e1c1"), ("0-0", "e1g1"), ("0-0-0", "e1c1")])
def test_resolve_castling(token: str, uci: str) -> None:
    assert san_to_move(position_from_fen(CASTLING_READY), token) == Move.from_uci(uci)


def test_resolve_black_castling() -> None:
    position = position_from_fen(CASTLING_READY.replace(" w ", " b "))
    assert san_to_move(position, "O-O") == Move.from_uci("e8g8")


def test_castling_without_right_is_unresolved() -> None:
    assert san_to_move(Position.starting(), "O-O") is None


@pytest.mark.parametrize("token", ["b8=N", "b8N"])
def test_resolve_promotion(token: str) -> None:
    position = Position.from_pieces({"b7": "P", "e1": "K", "h1": "k"})
    assert san_to_move(position, token) == Move.from_algebraic("b7", "b8", PieceType.KNIGHT)


def test_resolve_promotion_without_piece() -> None:
    position = Position.from_pieces({"b7": "P", "e1": "K", "h1": "k"})
    assert san_to_move(position, "b8") == Move.from_uci("b7b8")


@pytest.mark.parametrize(
    "pieces, san, uci",
    [
        (TWO_ROOKS_ON_A_RANK, "Rad1", "a1d1"),
        (TWO_ROOKS_ON_A_RANK, "Rhd1", "h1d1"),
        (TWO_ROOKS_ON_A_FILE, "R1a3", "a1a3"),
        (TWO_ROOKS_ON_A_FILE, "R5a3", "a5a3"),
        (THREE_QUEENS, "Qa1b2", "a1b2"),
    ],
)
def test_resolve_disambiguated(pieces: dict[str, str], san: str, uci: str) -> None:
    assert san_to_move(Position.from_pieces(pieces), san) == Move.from_uci(uci)


@pytest.mark.parametrize(
    "pieces, san",
    [
        (TWO_ROOKS_ON_A_RANK, "Rd1"),  # ambiguous
        (THREE_QUEENS, "Qab2"),  # still ambiguous
    ],
)
def test_ambiguous_tokens_are_unresolved(pieces: dict[str, str], san: str) -> None:
    assert san_to_move(Position.from_pieces(pieces), san) is None


@pytest.mark.parametrize("token", ["e5", "Ke2", "Nf4", "xyz", "", "Zz9", "exd5"])
def test_unresolvable_tokens(start: Position, token: str) -> None:
    assert san_to_move(start, token) is None


def test_encode_then_decode_every_legal_move() -> None:
    """From a busy middle game position, every legal move survives a trip through SAN"""
    position = position_from_fen("r1bqk2r/pppp1ppp/2n2n2/2b1p3/2B1P3/2N2N2/PPPP1PPP/R1BQK2R w KQkq - 4 5")
    for move in all_legal_moves(position):
        assert san_to_move(position, move_to_san(position, move)) == move
