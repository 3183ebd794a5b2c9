"""Pygame window, input mapping, assets and the frame loop."""

from __future__ import annotations

import logging
from pathlib import Path

import pygame

from duel_snake.config import GameConfig
from duel_snake.engine import GameEngine, GameEvent
from duel_snake.grid import Position
from duel_snake.snake import Direction, Snake
from duel_snake.timing import IntervalGate

logger = logging.getLogger(__name__)

TITLE = "2-Player Snake with Powerups"

LIGHT = (173, 204, 96)
DARK = (43, 51, 24)
RED = (230, 41, 55)
FOOD_COLOR = (190, 33, 55)
POWERUP_COLOR = (255, 203, 0)
PLAYER_COLORS = ((0, 117, 44), (0, 82, 172))

# key -> (player, direction). Arrows steer player 1, WASD player 2.
KEY_BINDINGS: dict[int, tuple[int, Direction]] = {
    pygame.K_UP: (0, Direction.UP),
    pygame.K_DOWN: (0, Direction.DOWN),
    pygame.K_LEFT: (0, Direction.LEFT),
    pygame.K_RIGHT: (0, Direction.RIGHT),
    pygame.K_w: (1, Direction.UP),
    pygame.K_s: (1, Direction.DOWN),
    pygame.K_a: (1, Direction.LEFT),
    pygame.K_d: (1, Direction.RIGHT),
}

_EVENT_SOUNDS = {
    GameEvent.ATE_FOOD: "eat",
    GameEvent.ATE_POWERUP: "powerup",
    GameEvent.COLLISION: "wall",
}


def key_to_command(key: int) -> tuple[int, Direction] | None:
    """Map a pressed key to a (player, direction) steering command."""
    return KEY_BINDINGS.get(key)


def _pygame_clock() -> float:
    return pygame.time.get_ticks() / 1000.0


class Assets:
    """Optional textures and sounds loaded from an asset directory.

    Anything missing is logged and skipped; the renderer falls back to
    plain shapes and the game runs silently.
    """

    def __init__(self, asset_dir: str, cell_size: int, mute: bool = False) -> None:
        self.textures: dict[str, pygame.Surface] = {}
        self.sounds: dict[str, pygame.mixer.Sound] = {}
        root = Path(asset_dir)

        for name in ("food", "powerup"):
            path = root / "Graphics" / f"{name}.png"
            try:
                image = pygame.image.load(str(path)).convert_alpha()
            except (pygame.error, FileNotFoundError) as exc:
                logger.warning("Could not load texture %s: %s", path, exc)
                continue
            self.textures[name] = pygame.transform.smoothscale(image, (cell_size, cell_size))

        if mute:
            return
        try:
            pygame.mixer.init()
        except pygame.error as exc:
            logger.warning("Audio device unavailable, running silent: %s", exc)
            return
        for name in ("eat", "wall", "powerup"):
            path = root / "Sounds" / f"{name}.mp3"
            try:
                self.sounds[name] = pygame.mixer.Sound(str(path))
            except (pygame.error, FileNotFoundError) as exc:
                logger.warning("Could not load sound %s: %s", path, exc)

    def play(self, name: str) -> None:
        sound = self.sounds.get(name)
        if sound is not None:
            sound.play()


class SnakeApp:
    """Owns the window and drives a :class:`GameEngine` at a fixed tick rate."""

    def __init__(self, config: GameConfig) -> None:
        self.config = config
        pygame.init()
        self.engine = GameEngine(rules=config.rules, seed=config.seed, clock=_pygame_clock)
        self.board_px = config.cell_size * self.engine.grid.cell_count

        side = 2 * config.offset + self.board_px
        self.screen = pygame.display.set_mode((side, side))
        pygame.display.set_caption(TITLE)
        self.clock = pygame.time.Clock()
        self.title_font = pygame.font.SysFont(None, 48)
        self.font = pygame.font.SysFont(None, 26)
        self.assets = Assets(config.asset_dir, config.cell_size, mute=config.mute)
        self.gate = IntervalGate(config.tick_interval, clock=_pygame_clock)

    def run(self) -> None:
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    self.handle_key(event.key)

            if self.engine.running and self.gate.ready():
                for game_event in self.engine.tick():
                    sound = _EVENT_SOUNDS.get(game_event)
                    if sound is not None:
                        self.assets.play(sound)

            self.draw()
            pygame.display.flip()
            self.clock.tick(self.config.fps)

        pygame.quit()

    def handle_key(self, key: int) -> None:
        if self.engine.game_over:
            if key == pygame.K_SPACE:
                self.engine.reset()
                self.gate.restart()
            return
        command = key_to_command(key)
        if command is not None:
            self.engine.set_direction(*command)

    # --- drawing ---

    def _cell_rect(self, position: Position) -> pygame.Rect:
        size = self.config.cell_size
        x, y = position
        return pygame.Rect(self.config.offset + x * size, self.config.offset + y * size, size, size)

    def _draw_snake(self, snake: Snake, color: tuple[int, int, int]) -> None:
        radius = self.config.cell_size // 4
        for segment in snake.body:
            pygame.draw.rect(self.screen, color, self._cell_rect(segment), border_radius=radius)

    def _draw_collectible(self, name: str, position: Position, color: tuple[int, int, int]) -> None:
        rect = self._cell_rect(position)
        texture = self.assets.textures.get(name)
        if texture is not None:
            self.screen.blit(texture, rect)
        else:
            pygame.draw.circle(self.screen, color, rect.center, self.config.cell_size // 2 - 2)

    def draw(self) -> None:
        engine = self.engine
        offset = self.config.offset
        self.screen.fill(LIGHT)

        if engine.game_over:
            middle = offset + self.board_px // 2
            self.screen.blit(
                self.title_font.render(engine.message, True, RED), (offset + 100, middle),
            )
            self.screen.blit(
                self.font.render("Press SPACE to Restart", True, RED), (offset + 100, middle + 50),
            )
        else:
            for snake, color in zip(engine.snakes, PLAYER_COLORS, strict=True):
                self._draw_snake(snake, color)
            if engine.food.active:
                self._draw_collectible("food", engine.food.position, FOOD_COLOR)
            if engine.powerup_visible:
                self._draw_collectible("powerup", engine.powerup.position, POWERUP_COLOR)

        border = pygame.Rect(offset - 5, offset - 5, self.board_px + 10, self.board_px + 10)
        pygame.draw.rect(self.screen, DARK, border, width=5)
        self.screen.blit(self.title_font.render("2-Player Snake", True, DARK), (offset - 5, 20))
        score_y = offset + self.board_px + 10
        self.screen.blit(
            self.font.render(f"P1 Score: {engine.scores[0]:02d}", True, DARK), (offset - 5, score_y),
        )
        self.screen.blit(
            self.font.render(f"P2 Score: {engine.scores[1]:02d}", True, DARK), (offset + 300, score_y),
        )
