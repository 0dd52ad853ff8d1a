"""
Game History State Machine
----

The ordered list of moves played, a cursor into that list, and the outcomes that cannot be read from the board
(draw by agreement, resignation).

`game_reducer(state, action)` is pure: it never changes the state it is given, it returns a new one.
It does not know any chess rules. Whether a move is legal, or whether the position is checkmate,
is decided by the caller before dispatching (see src/services/practice_service.py).
The board for a given cursor is rebuilt by replaying the moves (see src/history/replay.py).
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Sequence

from src.chess.moves import Move
from src.chess.result import Draw, GameResult, Ongoing, Resignation, is_game_over
from src.core.shared_types import Color, DrawReason, opponent


@dataclass(frozen=True)
class GameHistoryState:
    """
    * move_history: every move played (also the ones after the cursor, while looking back at earlier positions)
    * current_move_index: the last move applied to the displayed position. -1 is the starting position.
    * is_previewing: looking at an earlier position (the cursor is not at the last move)
    * draw_offer_by: the color with a pending draw offer
    * game_result: only draws by agreement and resignations are recorded here
    """

    move_history: tuple[Move, ...] = ()
    current_move_index: int = -1
    is_previewing: bool = False
    draw_offer_by: Optional[Color] = None
    game_result: GameResult = field(default_factory=Ongoing)

    @property
    def last_index(self) -> int:
        return len(self.move_history) - 1

    @property
    def is_at_end(self) -> bool:
        return self.current_move_index == self.last_index

    @property
    def applied_moves(self) -> tuple[Move, ...]:
        """The moves that lead to the displayed position"""
        return self.move_history[: self.current_move_index + 1]


def initial_state() -> GameHistoryState:
    return GameHistoryState()


def side_to_move(state: GameHistoryState) -> Color:
    """White plays the even plies (0, 2, ...). The next ply is current_move_index + 1."""
    return Color.WHITE if (state.current_move_index + 1) % 2 == 0 else Color.BLACK


def is_valid_index(state: GameHistoryState, index: int) -> bool:
    return -1 <= index <= state.last_index


def _previewing_at(state: GameHistoryState, index: int) -> bool:
    """Anywhere but the last move. (With an empty history, index -1 IS the last move.)"""
    return index < state.last_index


# --- ACTIONS ---
@dataclass(frozen=True)
class MakeMove:
    move: Move


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class NextMove:
    pass


@dataclass(frozen=True)
class PreviousMove:
    pass


@dataclass(frozen=True)
class JumpToMove:
    index: int


@dataclass(frozen=True)
class OfferDraw:
    pass


@dataclass(frozen=True)
class AcceptDraw:
    pass


@dataclass(frozen=True)
class DeclineDraw:
    pass


@dataclass(frozen=True)
class Resign:
    pass


@dataclass(frozen=True)
class UpdateComment:
    """Blank comments remove the comment"""

    index: int
    comment: Optional[str]


@dataclass(frozen=True)
class LoadMoves:
    """Replace the whole game by the given moves (an imported kifu)"""

    moves: Sequence[Move]


Action = (
    MakeMove
    | Undo
    | Reset
    | NextMove
    | PreviousMove
    | JumpToMove
    | OfferDraw
    | AcceptDraw
    | DeclineDraw
    | Resign
    | UpdateComment
    | LoadMoves
)


# --- HANDLERS ---
def _make_move(state: GameHistoryState, action: MakeMove) -> GameHistoryState:
    """
    Playing a move from an earlier position throws away every move after the cursor.
    A move also ends any pending draw offer.
    """
    if is_game_over(state.game_result):
        return state

    new_history = state.applied_moves + (action.move,)
    return replace(
        state,
        move_history=new_history,
        current_move_index=len(new_history) - 1,
        is_previewing=False,
        draw_offer_by=None,
    )


def _undo(state: GameHistoryState, action: Undo) -> GameHistoryState:
    """Only the cursor moves back. The move itself stays in the history until a different move is played."""
    if state.current_move_index < 0:
        return state
    return replace(state, current_move_index=state.current_move_index - 1, is_previewing=False)


def _reset(state: GameHistoryState, action: Reset) -> GameHistoryState:
    return initial_state()


def _jump(state: GameHistoryState, index: int) -> GameHistoryState:
    if not is_valid_index(state, index):
        return state
    return replace(state, current_move_index=index, is_previewing=_previewing_at(state, index))


def _next_move(state: GameHistoryState, action: NextMove) -> GameHistoryState:
    return _jump(state, state.current_move_index + 1)


def _previous_move(state: GameHistoryState, action: PreviousMove) -> GameHistoryState:
    return _jump(state, state.current_move_index - 1)


def _jump_to_move(state: GameHistoryState, action: JumpToMove) -> GameHistoryState:
    return _jump(state, action.index)


def _offer_draw(state: GameHistoryState, action: OfferDraw) -> GameHistoryState:
    if is_game_over(state.game_result):
        return state
    return replace(state, draw_offer_by=side_to_move(state))


def _accept_draw(state: GameHistoryState, action: AcceptDraw) -> GameHistoryState:
    if state.draw_offer_by is None or is_game_over(state.game_result):
        return state
    return replace(state, game_result=Draw(DrawReason.AGREED), draw_offer_by=None)


def _decline_draw(state: GameHistoryState, action: DeclineDraw) -> GameHistoryState:
    return replace(state, draw_offer_by=None)


def _resign(state: GameHistoryState, action: Resign) -> GameHistoryState:
    """The player to move resigns"""
    if is_game_over(state.game_result):
        return state
    return replace(state, game_result=Resignation(winner=opponent(side_to_move(state))))


def _update_comment(state: GameHistoryState, action: UpdateComment) -> GameHistoryState:
    if not 0 <= action.index <= state.last_index:
        return state

    history = list(state.move_history)
    history[action.index] = history[action.index].with_comment(action.comment)
    return replace(state, move_history=tuple(history))


def _load_moves(state: GameHistoryState, action: LoadMoves) -> GameHistoryState:
    moves = tuple(action.moves)
    return GameHistoryState(move_history=moves, current_move_index=len(moves) - 1)


# --- STRATEGY PATTERN: ONE HANDLER PER ACTION ---
Handler = Callable[[GameHistoryState, Action], GameHistoryState]
ACTION_HANDLERS: dict[type, Handler] = {
    MakeMove: _make_move,
    Undo: _undo,
    Reset: _reset,
    NextMove: _next_move,
    PreviousMove: _previous_move,
    JumpToMove: _jump_to_move,
    OfferDraw: _offer_draw,
    AcceptDraw: _accept_draw,
    DeclineDraw: _decline_draw,
    Resign: _resign,
    UpdateComment: _update_comment,
    LoadMoves: _load_moves,
}


def game_reducer(state: GameHistoryState, action: Action) -> GameHistoryState:
    """Unknown actions leave the state as it is"""
    handler = ACTION_HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(state, action)


def effective_result(state: GameHistoryState, position_result: GameResult) -> GameResult:
    """
    The result to show for the displayed position.
    ----

    * looking at an earlier position: the game is not over (yet)
    * a draw by agreement or a resignation beats anything the board says
    * otherwise: whatever the evaluation of the position gave
    """
    if state.is_previewing:
        return Ongoing()
    if is_game_over(state.game_result):
        return state.game_result
    return position_result
