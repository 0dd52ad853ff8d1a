"""
Game Result Evaluator

The outcome of a game, as far as it can be derived from the position (and the positions that came before it).
Draws by agreement and resignations are not visible on the board; the game history records those
(see src/history/state.py) and they take precedence once set.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from src.chess.legal_moves import has_any_legal_move
from src.chess.moves import is_king_in_check
from src.chess.position import Position
from src.core.shared_types import Color, DrawReason, opponent

FIFTY_MOVE_RULE_HALF_MOVES = 50
REPETITIONS_FOR_DRAW = 3


@dataclass(frozen=True)
class Ongoing:
    pass


@dataclass(frozen=True)
class Checkmate:
    winner: Color


@dataclass(frozen=True)
class Stalemate:
    pass


@dataclass(frozen=True)
class Draw:
    reason: DrawReason


@dataclass(frozen=True)
class Resignation:
    winner: Color


GameResult = Ongoing | Checkmate | Stalemate | Draw | Resignation


def evaluate_position(
    position: Position, position_history: Optional[Sequence[Position]] = None
) -> GameResult:
    """
    Determine the game status of a position.
    ----

    1. No legal moves? Checkmate if in check (the opponent wins), otherwise stalemate.
    2. The same position (pieces, color to move, castling rights, en passant square) occurred 3 times --> draw.
       `position_history` holds the positions reached BEFORE the current one, the current one counts as the first occurrence.
    3. 50 moves by both players without a pawn move or capture --> draw.
    """
    in_check = is_king_in_check(position, position.active_color)

    if not has_any_legal_move(position):
        if in_check:
            return Checkmate(winner=opponent(position.active_color))
        return Stalemate()

    if position_history is not None and _is_threefold_repetition(position, position_history):
        return Draw(DrawReason.THREEFOLD_REPETITION)

    if position.half_move_clock >= FIFTY_MOVE_RULE_HALF_MOVES:
        return Draw(DrawReason.FIFTY_MOVE_RULE)

    return Ongoing()


def _is_threefold_repetition(position: Position, position_history: Sequence[Position]) -> bool:
    key = position.repetition_key()
    occurrences = 1 + sum(1 for previous in position_history if previous.repetition_key() == key)
    return occurrences >= REPETITIONS_FOR_DRAW


def is_game_over(result: GameResult) -> bool:
    return not isinstance(result, Ongoing)


def winner_of(result: GameResult) -> Optional[Color]:
    """None for ongoing games and draws"""
    if isinstance(result, (Checkmate, Resignation)):
        return result.winner
    return None
