"""
Kifu: the record of a game, as text.
----

Two export formats:

* plain notation: "1. e4 {comment} e5 2. Nf3 Nc6 1-0 (checkmate)"
* PGN-like: seven bracketed header lines, a blank line, and the notation body

Import (`parse_kifu_text()`) accepts both. It is best-effort: tokens that cannot be resolved
into a legal move are skipped, the rest of the game is still read.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, Optional, Sequence

from src.chess.applicator import apply_move
from src.chess.moves import Move
from src.chess.position import Position
from src.chess.result import Checkmate, Draw, GameResult, Ongoing, Resignation, Stalemate
from src.core.config import SETTINGS, Settings
from src.core.shared_types import Color, DrawReason
from src.notation.san import move_to_san, san_to_move

logger = logging.getLogger(__name__)

RESULT_TOKENS = {"1-0", "0-1", "1/2-1/2", "*"}

_HEADER_RE = re.compile(r'^\[(\w+)\s+"((?:[^"\\]|\\.)*)"\]\s*$')
_MOVE_NUMBER_RE = re.compile(r"^\d+\.+")

# (character, escaped form). The backslash goes first, or the other escapes get escaped again.
_COMMENT_ESCAPES = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("{", "\\{"),
    ("}", "\\}"),
    ("\n", "\\n"),
)
_UNESCAPED = {"n": "\n"}


@dataclass(frozen=True)
class ParsedKifu:
    moves: list[Move] = field(default_factory=list)
    result_token: str = "*"
    headers: dict[str, str] = field(default_factory=dict)


# --- COMMENTS ---
def escape_comment(comment: str) -> str:
    for character, escaped in _COMMENT_ESCAPES:
        comment = comment.replace(character, escaped)
    return comment


def unescape_comment(text: str) -> str:
    """Reverse of escape_comment(). '\\n' becomes a newline, any other escaped character stands for itself."""
    characters: list[str] = []
    idx = 0
    while idx < len(text):
        ch = text[idx]
        if ch == "\\" and idx + 1 < len(text):
            nxt = text[idx + 1]
            characters.append(_UNESCAPED.get(nxt, nxt))
            idx += 2
            continue
        characters.append(ch)
        idx += 1
    return "".join(characters)


# --- RESULTS ---
def result_token(game_result: Optional[GameResult]) -> str:
    """The PGN result token: 1-0, 0-1, 1/2-1/2, or * for a game still in progress."""
    if isinstance(game_result, (Checkmate, Resignation)):
        return "1-0" if game_result.winner == Color.WHITE else "0-1"
    if isinstance(game_result, (Draw, Stalemate)):
        return "1/2-1/2"
    return "*"


def result_text(game_result: Optional[GameResult]) -> str:
    """
    Result token followed by the reason, for the plain notation export.
    Empty for a game that is still going on.
    """
    if game_result is None or isinstance(game_result, Ongoing):
        return ""

    token = result_token(game_result)
    if isinstance(game_result, Checkmate):
        return f"{token} (checkmate)"
    if isinstance(game_result, Stalemate):
        return f"{token} (stalemate)"
    if isinstance(game_result, Draw):
        reason = "draw agreed" if game_result.reason == DrawReason.AGREED else game_result.reason
        return f"{token} ({reason})"

    loser = "Black" if game_result.winner == Color.WHITE else "White"
    return f"{token} ({loser} resigned)"


# --- EXPORT ---
def moves_to_san_list(moves: Sequence[Move], start: Optional[Position] = None) -> list[str]:
    """
    SAN of every move, replayed from the start position.
    Raises IllegalMoveError if one of the moves cannot be played.
    """
    position = start if start is not None else Position.starting()
    sans: list[str] = []
    for move in moves:
        sans.append(move_to_san(position, move))
        position = apply_move(position, move)
    return sans


def _movetext(moves: Sequence[Move]) -> str:
    parts: list[str] = []
    for ply, (move, san) in enumerate(zip(moves, moves_to_san_list(moves))):
        if ply % 2 == 0:
            parts.append(f"{ply // 2 + 1}.")
        parts.append(san)
        if move.comment:
            parts.append(f"{{{escape_comment(move.comment)}}}")
    return " ".join(parts)


def moves_to_text(moves: Sequence[Move], game_result: Optional[GameResult] = None) -> str:
    """'1. e4 e5 2. Nf3 Nc6' with comments in braces, and the result (if the game is over) at the end"""
    return " ".join(part for part in (_movetext(moves), result_text(game_result)) if part)


def pgn_headers(
    game_result: Optional[GameResult] = None,
    settings: Settings = SETTINGS,
    game_date: Optional[date] = None,
) -> dict[str, str]:
    return {
        "Event": settings.pgn_event,
        "Site": settings.pgn_site,
        "Date": (game_date or date.today()).isoformat(),
        "Round": "?",
        "White": settings.pgn_white,
        "Black": settings.pgn_black,
        "Result": result_token(game_result),
    }


def moves_to_pgn(
    moves: Sequence[Move],
    game_result: Optional[GameResult] = None,
    headers: Optional[dict[str, str]] = None,
    settings: Settings = SETTINGS,
) -> str:
    """
    PGN-like export
    ----

    [Event "Chess Practice Game"]
    ... (the seven header lines)

    1. e4 e5 2. Nf3 *

    Given `headers` override the defaults. The body ends with the result token.
    """
    all_headers = pgn_headers(game_result, settings)
    if headers:
        all_headers.update(headers)

    lines = [f'[{name} "{_escape_header_value(value)}"]' for name, value in all_headers.items()]
    body = " ".join(part for part in (_movetext(moves), result_token(game_result)) if part)
    return "\n".join(lines) + "\n\n" + body


# --- IMPORT ---
def parse_kifu_text(text: str, start: Optional[Position] = None) -> ParsedKifu:
    """
    Read a game from plain notation or PGN-like text.
    ----

    1. Header lines ("[Name "value"]") at the top are read and dropped.
    2. The rest is split into tokens: move numbers, SAN moves, {comments} and the result.
    3. SAN moves are resolved against the position reached so far. A comment belongs to the move before it.
    4. A token that cannot be resolved is skipped (and so is any comment following it).
    """
    headers, movetext = _split_headers(text)
    position = start if start is not None else Position.starting()
    moves: list[Move] = []
    token_result = "*"
    last_token_resolved = False

    for kind, token in _tokenize(movetext):
        if kind == "comment":
            if last_token_resolved:
                comment = unescape_comment(token).strip()
                moves[-1] = moves[-1].with_comment(comment or None)
            continue

        if token in RESULT_TOKENS:
            token_result = token
            last_token_resolved = False
            continue

        move = san_to_move(position, token)
        if move is None:
            logger.debug("Skipping unresolvable token %r (move %d)", token, len(moves) + 1)
            last_token_resolved = False
            continue

        moves.append(move)
        position = apply_move(position, move)
        last_token_resolved = True

    return ParsedKifu(moves=moves, result_token=token_result, headers=headers)


def _split_headers(text: str) -> tuple[dict[str, str], str]:
    """
    Header lines are only read at the top of the text (blank lines in between are fine).
    The movetext starts at the first other line, so a "[...]" line inside a comment stays part of it.
    """
    headers: dict[str, str] = {}
    lines = text.splitlines()
    for idx, line in enumerate(lines):
        if not line.strip():
            continue
        match = _HEADER_RE.match(line.strip())
        if match is None:
            return headers, "\n".join(lines[idx:])
        name, raw_value = match.groups()
        headers[name] = raw_value.replace('\\"', '"').replace("\\\\", "\\")
    return headers, ""


def _escape_header_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _tokenize(movetext: str) -> Iterator[tuple[str, str]]:
    """
    Yields ("comment", raw comment text) or ("token", token).
    Move numbers and parenthesized text (variations, or the reason after a result) are dropped here.
    """
    idx = 0
    total = len(movetext)

    while idx < total:
        ch = movetext[idx]

        if ch.isspace():
            idx += 1
            continue

        if ch == "{":
            end = _closing_brace(movetext, idx)
            yield "comment", movetext[idx + 1 : end]
            idx = end + 1
            continue

        if ch == "(":
            end = movetext.find(")", idx + 1)
            idx = total if end < 0 else end + 1
            continue

        token_end = idx
        while (
            token_end < total
            and not movetext[token_end].isspace()
            and movetext[token_end] not in "{("
        ):
            token_end += 1
        token = movetext[idx:token_end]
        idx = token_end

        # "1." and "1..." on their own, but also "1.e4"
        token = _MOVE_NUMBER_RE.sub("", token)
        if token:
            yield "token", token


def _closing_brace(movetext: str, start: int) -> int:
    """
    Index of the brace that closes the comment opened at `start`. Escaped braces don't count,
    unescaped ones nest. An unterminated comment runs to the end of the text.
    """
    depth = 0
    idx = start
    while idx < len(movetext):
        ch = movetext[idx]
        if ch == "\\":
            idx += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return idx
        idx += 1
    return len(movetext)
