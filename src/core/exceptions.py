"""
Exceptions shared by all layers.

Legality of a move is NOT communicated through exceptions (see `src/chess/validation.py`).
These are reserved for contract violations (applying a move that was never validated)
and for malformed input at the boundaries.
"""


class ChessError(Exception):
    """Base class for everything raised by this package."""


class IllegalMoveError(ChessError):
    """A move was applied without being legal. The caller skipped validation."""


class InvalidSquareError(ChessError, ValueError):
    """Text that cannot be interpreted as a square in algebraic notation."""


class InvalidFENError(ChessError, ValueError):
    """Text that cannot be interpreted as a FEN string."""


class InvalidRequestError(ChessError, ValueError):
    """
    Raised inside pydantic validators.
    NOTE: Must subclass ValueError, so pydantic converts it into a ValidationError.
    """


class RepositoryError(ChessError):
    """The persistence layer could not complete the request."""
