"""Game and rules configuration."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RulesConfig:
    """Scoring and power-up timing rules, in points and seconds."""

    food_reward: int = 1
    powerup_reward: int = 5
    powerup_duration: float = 10.0
    powerup_gap_min: int = 15
    powerup_gap_max: int = 16
    max_placement_attempts: int = 1_000

    def __post_init__(self) -> None:
        if self.food_reward < 0 or self.powerup_reward < 0:
            raise ValueError("food_reward and powerup_reward must be >= 0.")
        if self.powerup_duration <= 0:
            raise ValueError("powerup_duration must be positive.")
        if self.powerup_gap_min < 0:
            raise ValueError("powerup_gap_min must be >= 0.")
        if self.powerup_gap_max < self.powerup_gap_min:
            raise ValueError("powerup_gap_max must be >= powerup_gap_min.")
        if self.max_placement_attempts < 1:
            raise ValueError("max_placement_attempts must be at least 1.")


@dataclass(frozen=True)
class GameConfig:
    """Full game configuration.

    Supports JSON serialization so a setup can be saved and replayed.
    """

    # Loop
    tick_interval: float = 0.2
    fps: int = 60

    # Window
    cell_size: int = 30
    offset: int = 75

    # Randomness
    seed: int | None = None

    # Assets
    asset_dir: str = "."
    mute: bool = False

    # Rules
    rules: RulesConfig = field(default_factory=RulesConfig)

    def __post_init__(self) -> None:
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive.")
        if self.fps < 1:
            raise ValueError("fps must be at least 1.")
        if self.cell_size < 1 or self.offset < 0:
            raise ValueError("cell_size must be >= 1 and offset >= 0.")

    def to_dict(self) -> dict:
        """Serialize to a plain dict."""
        return asdict(self)

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def from_dict(cls, raw: dict) -> GameConfig:
        """Build a config from a plain dict, as produced by :meth:`to_dict`."""
        data = dict(raw)
        rules_data = data.pop("rules", {})
        return cls(**data, rules=RulesConfig(**rules_data))

    @classmethod
    def load(cls, path: str | Path) -> GameConfig:
        """Load config from a JSON file."""
        return cls.from_dict(json.loads(Path(path).read_text()))
