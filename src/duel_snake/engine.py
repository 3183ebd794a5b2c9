"""Tick-based two-player game engine composing grid, snakes and collectibles."""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable, Sequence

import numpy as np

from duel_snake.collectible import Collectible, GridFullError
from duel_snake.config import RulesConfig
from duel_snake.grid import CELL_COUNT, Grid, Position
from duel_snake.snake import Direction, Snake

logger = logging.getLogger(__name__)

PLAYER_COUNT = 2

# (head, direction) per player slot.
START_POSES: tuple[tuple[Position, Direction], ...] = (
    ((6, 9), Direction.RIGHT),
    ((18, 9), Direction.LEFT),
)


class GameStatus(enum.Enum):
    """Lifecycle of a match."""

    RUNNING = "running"
    GAME_OVER = "game_over"


class GameEvent(enum.Enum):
    """Things that happened during a tick, for sound and effects."""

    ATE_FOOD = "ate_food"
    ATE_POWERUP = "ate_powerup"
    COLLISION = "collision"
    POWERUP_SHOWN = "powerup_shown"
    POWERUP_EXPIRED = "powerup_expired"
    BOARD_FULL = "board_full"


def _validate_layout(
    grid: Grid, start_poses: Sequence[tuple[Position, Direction]],
) -> None:
    """Reject start poses that leave the grid or overlap each other."""
    if len(start_poses) != PLAYER_COUNT:
        raise ValueError(f"Exactly {PLAYER_COUNT} start poses are required.")

    occupied: set[Position] = set()
    for player, (start, direction) in enumerate(start_poses):
        snake = Snake(start, direction)
        for seg in snake.body:
            if not grid.in_bounds(seg):
                raise ValueError(
                    f"Start pose for player {player + 1} does not fit "
                    f"the {grid.cell_count}×{grid.cell_count} grid."
                )
            if seg in occupied:
                raise ValueError("Start poses overlap; move the snakes apart.")
            occupied.add(seg)


class GameEngine:
    """Two-snake, tick-based game engine.

    The engine owns the grid, both snakes, the food, the power-up and its
    visibility timers. Each call to :meth:`tick` advances the match by one
    step and returns the events it produced; :meth:`get_state` exposes a
    serializable snapshot for rendering.

    Time comes from *clock* (seconds, monotonic) and randomness from *rng*
    so tests can drive both.
    """

    def __init__(
        self,
        rules: RulesConfig | None = None,
        cell_count: int = CELL_COUNT,
        start_poses: Sequence[tuple[Position, Direction]] = START_POSES,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rules = rules or RulesConfig()
        self.grid = Grid(cell_count)
        _validate_layout(self.grid, start_poses)
        self.start_poses = tuple(start_poses)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self._clock = clock

        self.snakes = [Snake(start, direction) for start, direction in self.start_poses]

        attempts = self.rules.max_placement_attempts
        self.food = Collectible.food(
            self.grid, self.snakes[0].body, self.snakes[1].body,
            rng=self.rng, max_attempts=attempts,
        )
        self.powerup = Collectible.powerup(self.grid, rng=self.rng, max_attempts=attempts)
        self.powerup_visible = False
        self._powerup_shown_at = 0.0
        self._powerup_hidden_at = 0.0
        self._powerup_gap = 0
        self._hide_powerup(self._clock())

        self.scores = [0] * PLAYER_COUNT
        self.status = GameStatus.RUNNING
        self.winner: int | None = None
        self.message = ""
        self.tick_count = 0
        self.last_events: list[GameEvent] = []
        self._input_locked = [False] * PLAYER_COUNT

    @property
    def running(self) -> bool:
        return self.status is GameStatus.RUNNING

    @property
    def game_over(self) -> bool:
        return self.status is GameStatus.GAME_OVER

    @property
    def powerup_gap(self) -> int:
        """Seconds the power-up stays hidden during the current hidden period."""
        return self._powerup_gap

    def set_direction(self, player: int, direction: Direction) -> bool:
        """Steer a player's snake; at most one change per player per tick.

        Returns whether the change was applied.
        """
        if not 0 <= player < PLAYER_COUNT:
            raise ValueError(f"player {player} out of range [0, {PLAYER_COUNT}).")
        if self.game_over or self._input_locked[player]:
            return False
        if not self.snakes[player].set_direction(direction):
            return False
        self._input_locked[player] = True
        return True

    def tick(self) -> list[GameEvent]:
        """Advance the match by one step.

        Returns the events produced by this step; an empty list once the
        game is over.
        """
        if self.game_over:
            self.last_events = []
            return self.last_events

        events: list[GameEvent] = []
        now = self._clock()

        for snake in self.snakes:
            snake.advance()

        if not self.food.active:
            self._restore_food()
        for player in range(PLAYER_COUNT):
            self._check_food(player, events)
        for player in range(PLAYER_COUNT):
            self._check_powerup(player, now, events)

        winner = self._find_winner()
        if winner is not None:
            self._declare_winner(winner)
            events.append(GameEvent.COLLISION)

        self._update_powerup(now, events)

        self.tick_count += 1
        self._input_locked = [False] * PLAYER_COUNT
        self.last_events = events
        return events

    def reset(self) -> None:
        """Start a new match with fresh snakes, food and scores."""
        for snake, (start, direction) in zip(self.snakes, self.start_poses, strict=True):
            snake.reset(start, direction)
        self._relocate_food()
        self._hide_powerup(self._clock())
        self.scores = [0] * PLAYER_COUNT
        self.status = GameStatus.RUNNING
        self.winner = None
        self.message = ""
        self.tick_count = 0
        self.last_events = []
        self._input_locked = [False] * PLAYER_COUNT
        logger.info("Game reset.")

    def get_state(self) -> dict:
        """Return the full, serializable game state."""
        return {
            "tick": self.tick_count,
            "status": self.status.value,
            "running": self.running,
            "game_over": self.game_over,
            "winner": self.winner,
            "message": self.message,
            "scores": list(self.scores),
            "grid": self.grid.to_dict(),
            "snakes": [s.to_dict() for s in self.snakes],
            "food": self.food.to_dict(),
            "powerup": {**self.powerup.to_dict(), "visible": self.powerup_visible},
            "events": [e.value for e in self.last_events],
        }

    # --- consumption ---

    def _check_food(self, player: int, events: list[GameEvent]) -> None:
        snake = self.snakes[player]
        if not self.food.active or snake.head != self.food.position:
            return
        snake.request_growth()
        self.scores[player] += self.rules.food_reward
        events.append(GameEvent.ATE_FOOD)
        if not self._relocate_food():
            events.append(GameEvent.BOARD_FULL)

    def _check_powerup(self, player: int, now: float, events: list[GameEvent]) -> None:
        snake = self.snakes[player]
        if not self.powerup_visible or snake.head != self.powerup.position:
            return
        self._hide_powerup(now)
        snake.request_growth()
        self.scores[player] += self.rules.powerup_reward
        events.append(GameEvent.ATE_POWERUP)

    def _relocate_food(self) -> bool:
        try:
            self.food.relocate(self.snakes[0].body, self.snakes[1].body)
        except GridFullError:
            logger.warning("No free cell left for food; board is full.")
            return False
        return True

    def _restore_food(self) -> None:
        """Put food back once the snakes have freed a cell."""
        try:
            self.food.relocate(self.snakes[0].body, self.snakes[1].body)
        except GridFullError:
            return
        logger.info("Food back on the board at %s.", self.food.position)

    # --- collisions ---

    def _find_winner(self) -> int | None:
        """Apply collision rules in fixed priority; the first violation decides."""
        a, b = self.snakes
        checks: tuple[tuple[Callable[[], bool], int], ...] = (
            (lambda: not self.grid.in_bounds(a.head), 1),
            (lambda: not self.grid.in_bounds(b.head), 0),
            (a.self_collision, 1),
            (b.self_collision, 0),
            (lambda: b.occupies(a.head), 1),
            (lambda: a.occupies(b.head), 0),
        )
        for violated, winner in checks:
            if violated():
                return winner
        return None

    def _declare_winner(self, winner: int) -> None:
        self.status = GameStatus.GAME_OVER
        self.winner = winner
        self.message = f"Player {winner + 1} Wins!"
        logger.info(
            "Player %d won at tick %d (scores %d-%d).",
            winner + 1, self.tick_count + 1, self.scores[0], self.scores[1],
        )

    # --- power-up lifecycle ---

    def _hide_powerup(self, now: float) -> None:
        self.powerup.deactivate()
        self.powerup_visible = False
        self._powerup_hidden_at = now
        self._powerup_gap = int(
            self.rng.integers(self.rules.powerup_gap_min, self.rules.powerup_gap_max + 1)
        )

    def _update_powerup(self, now: float, events: list[GameEvent]) -> None:
        if self.powerup_visible:
            if now - self._powerup_shown_at >= self.rules.powerup_duration:
                self._hide_powerup(now)
                events.append(GameEvent.POWERUP_EXPIRED)
                logger.debug("Power-up expired; next one in %ds.", self._powerup_gap)
        elif now - self._powerup_hidden_at >= self._powerup_gap:
            try:
                self.powerup.relocate(self.snakes[0].body, self.snakes[1].body)
            except GridFullError:
                logger.warning("No free cell left for the power-up; skipping.")
                self._hide_powerup(now)
                return
            self.powerup_visible = True
            self._powerup_shown_at = now
            events.append(GameEvent.POWERUP_SHOWN)
            logger.debug("Power-up shown at %s.", self.powerup.position)
