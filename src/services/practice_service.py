"""
Orchestration of the practice game: from UI requests to the rules engine, the history state machine and persistence
(and the reverse direction).
"""

import logging
from typing import Optional

from src.api.models import MoveRequest
from src.chess.legal_moves import legal_moves
from src.chess.position import Position
from src.chess.result import GameResult, evaluate_position, is_game_over
from src.chess.square import Square
from src.chess.validation import Invalid, ValidationResult, validate_move
from src.core.config import SETTINGS, Settings
from src.core.exceptions import IllegalMoveError, RepositoryError
from src.db.repository import SessionStore
from src.history.codec import deserialize_state, serialize_state
from src.history.replay import replay_positions
from src.history.state import (
    AcceptDraw,
    Action,
    DeclineDraw,
    GameHistoryState,
    JumpToMove,
    LoadMoves,
    MakeMove,
    NextMove,
    OfferDraw,
    PreviousMove,
    Resign,
    Undo,
    UpdateComment,
    effective_result,
    game_reducer,
    initial_state,
)
from src.notation.kifu import moves_to_pgn, moves_to_san_list, moves_to_text, parse_kifu_text

logger = logging.getLogger(__name__)


class PracticeService:
    """Orchestration of layers for a local two-player practice game."""

    def __init__(self, store: SessionStore, settings: Settings = SETTINGS) -> None:
        self.store = store
        self.settings = settings
        self.state = self._load()

    # --- QUERIES ---
    def current_position(self) -> Position:
        """The displayed position (the one at the cursor)"""
        return replay_positions(self.state.applied_moves)[-1]

    def game_result(self) -> GameResult:
        """Result for the displayed position. While looking at an earlier position the game is never over."""
        positions = replay_positions(self.state.applied_moves)
        return effective_result(self.state, evaluate_position(positions[-1], positions[:-1]))

    def final_result(self) -> GameResult:
        """Result at the end of the game, wherever the cursor is. Used for the exports."""
        if is_game_over(self.state.game_result):
            return self.state.game_result
        positions = replay_positions(self.state.move_history)
        return evaluate_position(positions[-1], positions[:-1])

    def legal_moves(self, square: str) -> list[str]:
        """Destination squares (algebraic, sorted) for the piece on the given square"""
        if self._is_over():
            return []
        targets = legal_moves(self.current_position(), Square.from_algebraic(square))
        return [target.to_algebraic() for target in sorted(targets)]

    def san_moves(self) -> list[str]:
        """The move list for display"""
        return moves_to_san_list(self.state.move_history)

    # --- MOVES ---
    def play_move(self, request: MoveRequest) -> ValidationResult:
        """
        Attempt a move on the displayed position.
        ----

        Played from an earlier position, the moves after it are thrown away.
        Nothing changes (and nothing is saved) when the move is not legal.
        A resigned or agreed game stays over, also while looking back at an earlier position.
        """
        if self._is_over():
            return Invalid("game is over")

        move = request.to_move()
        result = validate_move(self.current_position(), move)
        if result.is_valid:
            self._dispatch(MakeMove(move))
        return result

    # --- NAVIGATION ---
    def undo(self) -> None:
        self._dispatch(Undo())

    def next_move(self) -> None:
        self._dispatch(NextMove())

    def previous_move(self) -> None:
        self._dispatch(PreviousMove())

    def jump_to(self, index: int) -> None:
        self._dispatch(JumpToMove(index))

    # --- DRAWS / RESIGNATION ---
    def offer_draw(self) -> None:
        self._dispatch(OfferDraw())

    def accept_draw(self) -> None:
        self._dispatch(AcceptDraw())

    def decline_draw(self) -> None:
        self._dispatch(DeclineDraw())

    def resign(self) -> None:
        self._dispatch(Resign())

    # --- ANNOTATION / KIFU ---
    def update_comment(self, index: int, comment: Optional[str]) -> None:
        self._dispatch(UpdateComment(index, comment))

    def export_text(self) -> str:
        return moves_to_text(self.state.move_history, self.final_result())

    def export_pgn(self) -> str:
        return moves_to_pgn(self.state.move_history, self.final_result(), settings=self.settings)

    def import_kifu(self, text: str) -> int:
        """Replace the current game by the one in the text. Returns the number of moves read."""
        parsed = parse_kifu_text(text)
        self._dispatch(LoadMoves(parsed.moves))
        logger.info("Imported a game of %d moves", len(parsed.moves))
        return len(parsed.moves)

    def reset(self) -> None:
        self.state = initial_state()
        try:
            self.store.clear(self.settings.session_key)
        except RepositoryError:
            logger.warning("Could not clear the stored game state", exc_info=True)
        logger.info("Game reset")

    # -- Internal helpers --
    def _is_over(self) -> bool:
        """A recorded result ends the game at every cursor position. The board result only at the displayed one."""
        return is_game_over(self.state.game_result) or is_game_over(self.game_result())

    def _dispatch(self, action: Action) -> None:
        self.state = game_reducer(self.state, action)
        self._save()

    def _save(self) -> None:
        """A game that cannot be stored can still be played. It is only lost on the next load."""
        try:
            self.store.save(self.settings.session_key, serialize_state(self.state))
        except RepositoryError:
            logger.warning("Could not save the game state", exc_info=True)

    def _load(self) -> GameHistoryState:
        """
        Stored game, if there is a valid one. Anything else (nothing stored, storage failing, a corrupt record,
        moves that cannot be replayed) starts a new game.
        """
        try:
            raw = self.store.load(self.settings.session_key)
        except RepositoryError:
            logger.warning("Could not load the stored game state", exc_info=True)
            return initial_state()

        if raw is None:
            return initial_state()

        state = deserialize_state(raw)
        try:
            replay_positions(state.move_history)
        except IllegalMoveError:
            logger.warning("Discarding stored game state: its moves cannot be replayed")
            return initial_state()
        return state
