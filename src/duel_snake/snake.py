"""Snake representation and movement logic."""

from __future__ import annotations

import enum
from collections import deque

from duel_snake.grid import Position, offset


class Direction(enum.Enum):
    """Cardinal movement directions with (dx, dy) values."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def opposite(self) -> Direction:
        dx, dy = self.value
        return Direction((-dx, -dy))


class Snake:
    """A snake represented as an ordered deque of (x, y) body segments.

    The head is ``body[0]``; the tail is ``body[-1]``.
    """

    START_LENGTH = 3

    def __init__(self, start: Position, direction: Direction = Direction.RIGHT) -> None:
        self.body: deque[Position] = deque()
        self.direction = direction
        self.grow_pending = False
        self.reset(start, direction)

    @property
    def head(self) -> Position:
        """Return the head coordinate."""
        return self.body[0]

    def reset(self, start: Position, direction: Direction) -> None:
        """Replace the body with a fresh snake trailing behind *start*."""
        dx, dy = direction.value
        self.body = deque(
            (start[0] - dx * i, start[1] - dy * i)
            for i in range(self.START_LENGTH)
        )
        self.direction = direction
        self.grow_pending = False

    def set_direction(self, new_direction: Direction) -> bool:
        """Change direction, ignoring 180° reversals.

        Returns whether the direction was applied.
        """
        if new_direction == self.direction.opposite:
            return False
        self.direction = new_direction
        return True

    def next_head(self) -> Position:
        """Compute the next head position without moving."""
        return offset(self.head, self.direction.value)

    def advance(self) -> None:
        """Move the snake one step forward, keeping the tail if growing."""
        self.body.appendleft(self.next_head())
        if self.grow_pending:
            self.grow_pending = False
        else:
            self.body.pop()

    def request_growth(self) -> None:
        """Grow by one segment on the next advance."""
        self.grow_pending = True

    def occupies(self, position: Position) -> bool:
        """Check whether the snake occupies a given cell."""
        return position in self.body

    def self_collision(self) -> bool:
        """Check whether the head overlaps any other body segment."""
        head = self.head
        return any(seg == head for seg in list(self.body)[1:])

    def to_dict(self) -> dict:
        """Serialize snake state to a dictionary."""
        return {
            "body": [list(seg) for seg in self.body],
            "direction": list(self.direction.value),
            "grow_pending": self.grow_pending,
        }
