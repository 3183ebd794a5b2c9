"""Duel Snake — two-player snake game engine."""

from duel_snake.collectible import Collectible, CollectibleKind, GridFullError
from duel_snake.config import GameConfig, RulesConfig
from duel_snake.engine import GameEngine, GameEvent, GameStatus
from duel_snake.grid import INACTIVE, Grid
from duel_snake.snake import Direction, Snake
from duel_snake.timing import IntervalGate

__all__ = [
    "INACTIVE",
    "Collectible",
    "CollectibleKind",
    "Direction",
    "GameConfig",
    "GameEngine",
    "GameEvent",
    "GameStatus",
    "Grid",
    "GridFullError",
    "IntervalGate",
    "RulesConfig",
    "Snake",
]
