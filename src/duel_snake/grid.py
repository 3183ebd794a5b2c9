"""Grid geometry for the duel snake game."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

Position = tuple[int, int]

# Marks a collectible with no active instance on the board.
INACTIVE: Position = (-1, -1)

CELL_COUNT = 25


def offset(position: Position, delta: tuple[int, int]) -> Position:
    """Return *position* moved by *delta*."""
    return position[0] + delta[0], position[1] + delta[1]


class Grid:
    """Square game grid addressed by (x, y) cell coordinates.

    The grid holds no state of its own beyond its size; occupancy is
    supplied by the caller as sequences of positions and rasterised into a
    NumPy mask when free cells have to be enumerated.
    """

    def __init__(self, cell_count: int = CELL_COUNT) -> None:
        if cell_count < 4:
            raise ValueError("Grid must be at least 4×4 cells.")
        self.cell_count = cell_count

    @property
    def size(self) -> int:
        """Total number of cells."""
        return self.cell_count * self.cell_count

    def in_bounds(self, position: Position) -> bool:
        """Check whether a position lies within the grid."""
        x, y = position
        return 0 <= x < self.cell_count and 0 <= y < self.cell_count

    def random_cell(self, rng: np.random.Generator) -> Position:
        """Sample a uniformly random cell."""
        x, y = rng.integers(0, self.cell_count, size=2)
        return int(x), int(y)

    def occupancy(self, *occupied: Iterable[Position]) -> np.ndarray:
        """Return a boolean ``[y, x]`` mask of the cells in *occupied*."""
        mask = np.zeros((self.cell_count, self.cell_count), dtype=bool)
        for cells in occupied:
            for position in cells:
                if self.in_bounds(position):
                    mask[position[1], position[0]] = True
        return mask

    def free_cells(self, *occupied: Iterable[Position]) -> list[Position]:
        """Return every cell not present in any of the *occupied* sequences."""
        ys, xs = np.where(~self.occupancy(*occupied))
        return list(zip(xs.tolist(), ys.tolist(), strict=True))

    def to_dict(self) -> dict:
        """Serialize grid dimensions to a dictionary."""
        return {"cell_count": self.cell_count}
