"""
Requests and records exchanged with the outside world.

* MoveRequest: what a UI submits (a pair of squares, and optionally the piece to promote to)
* GameHistoryRecord: the flat record a game is persisted as. Keys are camelCase on the wire.
"""

from typing import Literal, Optional, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
    model_validator,
)

from src.chess.moves import Move
from src.chess.pieces import PROMOTION_OPTIONS
from src.chess.square import Square, is_algebraic_square
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, DrawReason, PieceType


def _validate_square(value: str) -> str:
    if not is_algebraic_square(value):
        raise InvalidRequestError(f"Cannot interpret {value!r} as a valid square name.")
    return value


def _without_none(data: dict) -> dict:
    """Optional fields of a move or a result are left out of the record when not set"""
    return {key: value for key, value in data.items() if value is not None}


# --- REQUEST MODELS ---
class MoveRequest(BaseModel):
    """
    A move as submitted by a UI.
    `promotion` is optional: a pawn reaching the last rank without a choice becomes a Queen.
    """

    from_square: str
    to_square: str
    promotion: Optional[PieceType] = None

    @field_validator("from_square", "to_square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)

    @field_validator("promotion")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value is not None and value not in PROMOTION_OPTIONS:
            raise InvalidRequestError(f"Cannot promote to a {value}.")
        return value

    def to_move(self) -> Move:
        return Move(
            Square.from_algebraic(self.from_square),
            Square.from_algebraic(self.to_square),
            self.promotion,
        )


# --- PERSISTENCE RECORDS ---
class MoveRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_square: str = Field(alias="from")
    to_square: str = Field(alias="to")
    promotion: Optional[PieceType] = None
    comment: Optional[str] = None

    @field_validator("from_square", "to_square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)

    @classmethod
    def from_move(cls, move: Move) -> Self:
        return cls(
            from_square=move.from_square.to_algebraic(),
            to_square=move.to_square.to_algebraic(),
            promotion=move.promotion,
            comment=move.comment,
        )

    def to_move(self) -> Move:
        return Move(
            Square.from_algebraic(self.from_square),
            Square.from_algebraic(self.to_square),
            self.promotion,
            self.comment,
        )

    @model_serializer(mode="wrap")
    def drop_unset_fields(self, handler: SerializerFunctionWrapHandler) -> dict:
        return _without_none(handler(self))


ResultType = Literal["ongoing", "checkmate", "stalemate", "draw", "resignation"]


class GameResultRecord(BaseModel):
    """
    Tagged by `type`
    ----

    * checkmate / resignation carry a `winner`
    * draw carries a `reason`
    """

    type: ResultType = "ongoing"
    winner: Optional[Color] = None
    reason: Optional[DrawReason] = None

    @model_validator(mode="after")
    def check_fields_for_type(self) -> Self:
        if self.type in ("checkmate", "resignation") and self.winner is None:
            raise InvalidRequestError(f"A {self.type} result needs a winner.")
        if self.type == "draw" and self.reason is None:
            raise InvalidRequestError("A draw result needs a reason.")
        return self

    @model_serializer(mode="wrap")
    def drop_unset_fields(self, handler: SerializerFunctionWrapHandler) -> dict:
        return _without_none(handler(self))


class GameHistoryRecord(BaseModel):
    """The flat record. Every key is always written, `drawOfferBy` as null when no draw is offered."""

    model_config = ConfigDict(populate_by_name=True)

    move_history: list[MoveRecord] = Field(default_factory=list, alias="moveHistory")
    current_move_index: int = Field(default=-1, alias="currentMoveIndex")
    is_previewing: bool = Field(default=False, alias="isPreviewing")
    draw_offer_by: Optional[Color] = Field(default=None, alias="drawOfferBy")
    game_result: GameResultRecord = Field(default_factory=GameResultRecord, alias="gameResult")

    @model_validator(mode="after")
    def check_index_in_bounds(self) -> Self:
        """-1 (the starting position) up to the last move"""
        if not -1 <= self.current_move_index < len(self.move_history):
            raise InvalidRequestError(
                f"currentMoveIndex ({self.current_move_index}) is out of bounds. "
                f"History length: {len(self.move_history)}"
            )
        return self
