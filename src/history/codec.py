"""
Convert the game history to and from its persisted JSON record.

Loading never fails: a record that is malformed (bad JSON, index out of bounds, moves without squares, ...)
is replaced by a fresh game.
"""

import logging

from pydantic import ValidationError

from src.api.models import GameHistoryRecord, GameResultRecord, MoveRecord
from src.chess.result import Checkmate, Draw, GameResult, Ongoing, Resignation, Stalemate
from src.history.state import GameHistoryState, initial_state

logger = logging.getLogger(__name__)


def result_to_record(result: GameResult) -> GameResultRecord:
    if isinstance(result, Checkmate):
        return GameResultRecord(type="checkmate", winner=result.winner)
    if isinstance(result, Resignation):
        return GameResultRecord(type="resignation", winner=result.winner)
    if isinstance(result, Stalemate):
        return GameResultRecord(type="stalemate")
    if isinstance(result, Draw):
        return GameResultRecord(type="draw", reason=result.reason)
    return GameResultRecord(type="ongoing")


def result_from_record(record: GameResultRecord) -> GameResult:
    match record.type:
        case "checkmate":
            return Checkmate(winner=record.winner)
        case "resignation":
            return Resignation(winner=record.winner)
        case "stalemate":
            return Stalemate()
        case "draw":
            return Draw(reason=record.reason)
        case _:
            return Ongoing()


def state_to_record(state: GameHistoryState) -> GameHistoryRecord:
    return GameHistoryRecord(
        move_history=[MoveRecord.from_move(move) for move in state.move_history],
        current_move_index=state.current_move_index,
        is_previewing=state.is_previewing,
        draw_offer_by=state.draw_offer_by,
        game_result=result_to_record(state.game_result),
    )


def state_from_record(record: GameHistoryRecord) -> GameHistoryState:
    return GameHistoryState(
        move_history=tuple(move.to_move() for move in record.move_history),
        current_move_index=record.current_move_index,
        is_previewing=record.is_previewing,
        draw_offer_by=record.draw_offer_by,
        game_result=result_from_record(record.game_result),
    )


def serialize_state(state: GameHistoryState) -> str:
    return state_to_record(state).model_dump_json(by_alias=True)


def deserialize_state(text: str) -> GameHistoryState:
    """Falls back to the initial state for anything that does not validate."""
    try:
        record = GameHistoryRecord.model_validate_json(text)
    except ValidationError as exc:
        logger.warning(
            "Discarding stored game state (%d validation errors): %s",
            exc.error_count(),
            exc.errors()[0]["msg"],
        )
        return initial_state()
    return state_from_record(record)
