"""Food and power-up placement logic."""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence

import numpy as np

from duel_snake.grid import INACTIVE, Grid, Position

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 1000


class GridFullError(RuntimeError):
    """Raised when no free cell is left to place a collectible on."""


class CollectibleKind(enum.Enum):
    """What a collectible grants when eaten."""

    FOOD = "food"
    POWERUP = "powerup"


class Collectible:
    """A single-cell consumable placed away from both snakes.

    Uses a NumPy RNG for reproducible placement. Build instances through
    :meth:`food` or :meth:`powerup` rather than the constructor.
    """

    def __init__(
        self,
        kind: CollectibleKind,
        grid: Grid,
        rng: np.random.Generator | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self.kind = kind
        self.grid = grid
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_attempts = max_attempts
        self.position: Position = INACTIVE

    @classmethod
    def food(
        cls,
        grid: Grid,
        occupied_a: Sequence[Position],
        occupied_b: Sequence[Position],
        rng: np.random.Generator | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> Collectible:
        """Create food already placed on a free cell."""
        food = cls(CollectibleKind.FOOD, grid, rng=rng, max_attempts=max_attempts)
        food.relocate(occupied_a, occupied_b)
        return food

    @classmethod
    def powerup(
        cls,
        grid: Grid,
        rng: np.random.Generator | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> Collectible:
        """Create an inactive power-up; it is placed when first shown."""
        return cls(CollectibleKind.POWERUP, grid, rng=rng, max_attempts=max_attempts)

    @property
    def active(self) -> bool:
        return self.position != INACTIVE

    def relocate(
        self,
        occupied_a: Sequence[Position],
        occupied_b: Sequence[Position],
    ) -> Position:
        """Move to a random cell absent from both occupied sequences.

        Rejection-samples up to ``max_attempts`` cells, then falls back to
        choosing among the cells that are actually free.

        Raises :class:`GridFullError` if every cell is occupied; the
        collectible is left off the board.
        """
        for _ in range(self.max_attempts):
            candidate = self.grid.random_cell(self.rng)
            if candidate not in occupied_a and candidate not in occupied_b:
                self.position = candidate
                return candidate

        free = self.grid.free_cells(occupied_a, occupied_b)
        if not free:
            self.position = INACTIVE
            raise GridFullError(
                f"No free cell left for {self.kind.value} on a "
                f"{self.grid.cell_count}×{self.grid.cell_count} grid."
            )
        logger.debug(
            "Random placement for %s gave up after %d attempts; "
            "choosing among %d free cells.",
            self.kind.value, self.max_attempts, len(free),
        )
        self.position = free[int(self.rng.integers(len(free)))]
        return self.position

    def deactivate(self) -> None:
        """Take the power-up off the board."""
        if self.kind is not CollectibleKind.POWERUP:
            raise ValueError("Only power-ups can be deactivated.")
        self.position = INACTIVE

    def to_dict(self) -> dict:
        """Serialize collectible state to a dictionary."""
        return {
            "kind": self.kind.value,
            "position": list(self.position),
            "active": self.active,
        }
