"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase

from src.core.exceptions import InvalidSquareError

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)


@dataclass(frozen=True, order=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (1,1) - (8,8)"""
        if not is_algebraic_square(sq):
            raise InvalidSquareError(f"Cannot interpret {sq!r} as a square.")
        file = ord(sq[0]) - ord("a") + 1
        rank = int(sq[1:])
        return cls(file, rank)

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a') - 1)}{self.rank}"

    def is_within_bounds(self) -> bool:
        return (1 <= self.file <= BOARD_DIMENSIONS[0]) and (
            1 <= self.rank <= BOARD_DIMENSIONS[1]
        )

    def offset(self, df: int, dr: int) -> Square:
        """The square reached by stepping (df, dr). Might fall off the board, check with is_within_bounds()"""
        return Square(self.file + df, self.rank + dr)

    def __str__(self) -> str:
        return self.to_algebraic()


def is_algebraic_square(sq: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank, and lie on the board"""
    num_files, num_ranks = BOARD_DIMENSIONS
    if not isinstance(sq, str) or len(sq) < 2:
        return False

    file_char, rank_char = sq[0], sq[1:]
    if file_char not in ascii_lowercase[:num_files]:
        return False

    if not rank_char.isdigit():
        return False

    return 1 <= int(rank_char) <= num_ranks


# a1, a2, ..., h8. Used whenever the whole board needs to be scanned.
ALL_SQUARES: tuple[Square, ...] = tuple(
    Square(file, rank)
    for file in range(1, BOARD_DIMENSIONS[0] + 1)
    for rank in range(1, BOARD_DIMENSIONS[1] + 1)
)
