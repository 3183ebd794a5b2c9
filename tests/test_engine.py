"""Tests for the GameEngine module."""

import json
from collections import deque

import pytest

from duel_snake.collectible import GridFullError
from duel_snake.config import RulesConfig
from duel_snake.engine import START_POSES, GameEngine, GameEvent, GameStatus
from duel_snake.grid import INACTIVE
from duel_snake.snake import Direction

FAR_CORNER = (24, 24)


@pytest.fixture
def engine(clock):
    eng = GameEngine(seed=0, clock=clock)
    # Keep food out of the snakes' way unless a test places it.
    eng.food.position = FAR_CORNER
    return eng


def _engine_with_poses(clock, poses):
    eng = GameEngine(start_poses=poses, seed=0, clock=clock)
    eng.food.position = FAR_CORNER
    return eng


class TestEngineInit:
    def test_default_init(self, engine):
        assert engine.scores == [0, 0]
        assert engine.tick_count == 0
        assert engine.status is GameStatus.RUNNING
        assert engine.running
        assert not engine.game_over
        assert engine.winner is None
        assert engine.message == ""

    def test_start_poses(self, engine):
        assert list(engine.snakes[0].body) == [(6, 9), (5, 9), (4, 9)]
        assert engine.snakes[0].direction == Direction.RIGHT
        assert list(engine.snakes[1].body) == [(18, 9), (19, 9), (20, 9)]
        assert engine.snakes[1].direction == Direction.LEFT

    def test_food_placed_off_snakes(self, clock):
        eng = GameEngine(seed=3, clock=clock)
        assert eng.food.active
        assert not eng.snakes[0].occupies(eng.food.position)
        assert not eng.snakes[1].occupies(eng.food.position)

    def test_powerup_starts_hidden(self, engine):
        assert not engine.powerup_visible
        assert engine.powerup.position == INACTIVE
        assert engine.powerup_gap in (15, 16)


class TestEngineLayoutValidation:
    def test_pose_outside_grid(self, clock):
        with pytest.raises(ValueError, match="does not fit"):
            GameEngine(start_poses=[((1, 5), Direction.RIGHT), START_POSES[1]], clock=clock)

    def test_overlapping_poses(self, clock):
        with pytest.raises(ValueError, match="overlap"):
            GameEngine(start_poses=[START_POSES[0], START_POSES[0]], clock=clock)

    def test_wrong_player_count(self, clock):
        with pytest.raises(ValueError, match="Exactly 2"):
            GameEngine(start_poses=START_POSES[:1], clock=clock)

    def test_grid_too_small(self, clock):
        with pytest.raises(ValueError, match="at least 4"):
            GameEngine(cell_count=3, clock=clock)


class TestEngineMovement:
    def test_basic_tick(self, engine):
        events = engine.tick()
        assert events == []
        assert engine.snakes[0].head == (7, 9)
        assert engine.snakes[1].head == (17, 9)
        assert engine.tick_count == 1
        assert engine.get_state()["tick"] == 1

    def test_direction_applies_immediately(self, engine):
        assert engine.set_direction(0, Direction.UP)
        assert engine.snakes[0].direction == Direction.UP
        engine.tick()
        assert engine.snakes[0].head == (6, 8)

    def test_reversal_ignored(self, engine):
        assert not engine.set_direction(0, Direction.LEFT)
        assert engine.snakes[0].direction == Direction.RIGHT

    def test_one_change_per_player_per_tick(self, engine):
        assert engine.set_direction(0, Direction.UP)
        # Up then left would fold the snake back onto its neck.
        assert not engine.set_direction(0, Direction.LEFT)
        assert engine.snakes[0].direction == Direction.UP
        # The other player is not locked.
        assert engine.set_direction(1, Direction.DOWN)

        engine.tick()
        assert engine.set_direction(0, Direction.LEFT)

    def test_rejected_reversal_does_not_lock(self, engine):
        assert not engine.set_direction(0, Direction.LEFT)
        assert engine.set_direction(0, Direction.DOWN)

    def test_invalid_player(self, engine):
        with pytest.raises(ValueError, match="out of range"):
            engine.set_direction(2, Direction.UP)


class TestEngineFood:
    def test_eating_food(self, engine):
        engine.food.position = engine.snakes[0].next_head()
        events = engine.tick()
        assert GameEvent.ATE_FOOD in events
        assert engine.scores == [1, 0]
        assert engine.snakes[0].grow_pending
        assert engine.food.active
        assert not engine.snakes[0].occupies(engine.food.position)
        assert not engine.snakes[1].occupies(engine.food.position)

        engine.food.position = FAR_CORNER
        engine.tick()
        assert len(engine.snakes[0].body) == 4
        assert len(engine.snakes[1].body) == 3

    def test_player_two_scores_separately(self, engine):
        engine.food.position = engine.snakes[1].next_head()
        engine.tick()
        assert engine.scores == [0, 1]

    def test_custom_reward(self, clock):
        eng = GameEngine(rules=RulesConfig(food_reward=3), seed=0, clock=clock)
        eng.food.position = eng.snakes[0].next_head()
        eng.tick()
        assert eng.scores[0] == 3

    def test_full_board_is_reported(self, engine, monkeypatch):
        engine.food.position = engine.snakes[0].next_head()
        self._fill_board(engine, monkeypatch)
        events = engine.tick()
        assert GameEvent.ATE_FOOD in events
        assert GameEvent.BOARD_FULL in events
        assert engine.food.position == INACTIVE
        assert engine.scores[0] == 1

        # Inactive food is never eaten again.
        engine.tick()
        assert not engine.food.active
        assert engine.scores[0] == 1

    def test_food_returns_once_cells_free_up(self, engine, monkeypatch):
        engine.food.position = engine.snakes[0].next_head()
        self._fill_board(engine, monkeypatch)
        engine.tick()
        assert not engine.food.active

        monkeypatch.undo()
        events = engine.tick()
        assert GameEvent.BOARD_FULL not in events
        assert engine.food.active
        assert not engine.snakes[0].occupies(engine.food.position)
        assert not engine.snakes[1].occupies(engine.food.position)

    @staticmethod
    def _fill_board(engine, monkeypatch):
        """Make every placement attempt land on a snake with nothing free."""
        monkeypatch.setattr(engine.grid, "random_cell", lambda rng: engine.snakes[0].head)
        monkeypatch.setattr(engine.grid, "free_cells", lambda *occupied: [])


class TestEnginePowerup:
    def test_appears_after_gap(self, engine, clock):
        clock.advance(engine.powerup_gap - 1)
        assert GameEvent.POWERUP_SHOWN not in engine.tick()
        assert not engine.powerup_visible

        clock.advance(1)
        events = engine.tick()
        assert GameEvent.POWERUP_SHOWN in events
        assert engine.powerup_visible
        assert engine.powerup.active
        assert not engine.snakes[0].occupies(engine.powerup.position)
        assert not engine.snakes[1].occupies(engine.powerup.position)

    def test_expires_after_duration(self, engine, clock):
        clock.advance(engine.powerup_gap)
        engine.tick()
        assert engine.powerup_visible
        engine.powerup.position = (0, 0)

        clock.advance(9.5)
        engine.tick()
        assert engine.powerup_visible

        clock.advance(0.5)
        events = engine.tick()
        assert GameEvent.POWERUP_EXPIRED in events
        assert not engine.powerup_visible
        assert engine.powerup.position == INACTIVE
        assert engine.powerup_gap in (15, 16)

    def test_eating_powerup(self, engine, clock):
        clock.advance(engine.powerup_gap)
        engine.tick()
        engine.powerup.position = engine.snakes[0].next_head()

        events = engine.tick()
        assert GameEvent.ATE_POWERUP in events
        assert engine.scores == [5, 0]
        assert not engine.powerup_visible
        assert engine.powerup.position == INACTIVE
        assert engine.snakes[0].grow_pending

        # Stays hidden until a full gap has passed since it was eaten.
        gap = engine.powerup_gap
        clock.advance(gap - 0.5)
        engine.tick()
        assert not engine.powerup_visible
        clock.advance(0.5)
        engine.tick()
        assert engine.powerup_visible

    def test_hidden_powerup_cannot_be_eaten(self, engine):
        engine.powerup.position = engine.snakes[0].next_head()
        engine.tick()
        assert engine.scores == [0, 0]

    def test_spawn_failure_keeps_it_hidden(self, engine, clock, monkeypatch):
        def no_room(*_):
            raise GridFullError("full")

        monkeypatch.setattr(engine.powerup, "relocate", no_room)
        clock.advance(engine.powerup_gap)
        events = engine.tick()
        assert GameEvent.POWERUP_SHOWN not in events
        assert not engine.powerup_visible


class TestEngineCollisions:
    def test_head_on_collision(self, engine):
        # Heads start 12 cells apart and close by 2 per tick.
        for _ in range(5):
            engine.tick()
        assert engine.running

        events = engine.tick()
        assert engine.snakes[0].head == engine.snakes[1].head == (12, 9)
        assert GameEvent.COLLISION in events
        assert engine.game_over
        assert engine.winner == 1
        assert engine.message == "Player 2 Wins!"

    def test_simultaneous_exit_favors_player_two(self, clock):
        eng = _engine_with_poses(
            clock, [((2, 9), Direction.LEFT), ((22, 9), Direction.RIGHT)],
        )
        eng.tick()
        eng.tick()
        assert eng.running
        eng.tick()
        assert eng.snakes[0].head == (-1, 9)
        assert eng.snakes[1].head == (25, 9)
        assert eng.winner == 1

    def test_player_two_leaves_grid(self, clock):
        eng = _engine_with_poses(
            clock, [((6, 9), Direction.RIGHT), ((2, 3), Direction.UP)],
        )
        for _ in range(4):
            eng.tick()
        assert eng.game_over
        assert eng.winner == 0
        assert eng.message == "Player 1 Wins!"

    def test_self_collision(self, engine):
        engine.snakes[0].body = deque([(5, 5), (6, 5), (6, 6), (5, 6), (4, 6), (4, 7)])
        engine.snakes[0].direction = Direction.DOWN
        engine.tick()
        assert engine.snakes[0].head == (5, 6)
        assert engine.game_over
        assert engine.winner == 1

    def test_player_one_runs_into_player_two(self, clock):
        eng = _engine_with_poses(
            clock, [((6, 5), Direction.DOWN), ((6, 7), Direction.LEFT)],
        )
        eng.tick()
        assert eng.running
        eng.tick()
        assert eng.snakes[0].head == (6, 7)
        assert eng.winner == 1

    def test_player_two_runs_into_player_one(self, clock):
        eng = _engine_with_poses(
            clock, [((6, 7), Direction.LEFT), ((6, 5), Direction.DOWN)],
        )
        eng.tick()
        eng.tick()
        assert eng.snakes[1].head == (6, 7)
        assert eng.winner == 0

    def test_leaving_grid_outranks_self_collision(self, clock):
        eng = _engine_with_poses(
            clock, [((0, 9), Direction.LEFT), ((5, 5), Direction.UP)],
        )
        eng.snakes[1].body = deque([(5, 5), (6, 5), (6, 6), (5, 6), (4, 6), (4, 7)])
        eng.snakes[1].direction = Direction.DOWN
        eng.tick()
        assert eng.snakes[0].head == (-1, 9)
        assert eng.snakes[1].self_collision()
        assert eng.winner == 1

    def test_self_collision_outranks_hitting_the_opponent(self, engine):
        engine.snakes[0].body = deque([(5, 5), (6, 5), (6, 6), (5, 6), (4, 6), (4, 7)])
        engine.snakes[0].direction = Direction.DOWN
        engine.snakes[1].reset((7, 5), Direction.LEFT)
        engine.tick()
        assert engine.snakes[0].self_collision()
        assert engine.snakes[0].occupies(engine.snakes[1].head)
        assert not engine.snakes[1].occupies(engine.snakes[0].head)
        assert engine.winner == 1

    def test_game_over_stops_ticks(self, engine):
        for _ in range(6):
            engine.tick()
        assert engine.game_over
        state = engine.get_state()
        assert engine.tick() == []
        assert engine.get_state()["tick"] == state["tick"]
        assert engine.get_state()["snakes"] == state["snakes"]

    def test_no_steering_after_game_over(self, engine):
        for _ in range(6):
            engine.tick()
        assert not engine.set_direction(0, Direction.UP)


class TestEngineReset:
    def test_reset_after_game_over(self, engine, clock):
        clock.advance(engine.powerup_gap)
        engine.food.position = engine.snakes[0].next_head()
        engine.tick()
        engine.powerup.position = (0, 0)
        for _ in range(10):
            engine.tick()
        assert engine.game_over
        assert engine.scores[0] >= 1

        engine.reset()
        assert engine.status is GameStatus.RUNNING
        assert engine.scores == [0, 0]
        assert engine.winner is None
        assert engine.message == ""
        assert engine.tick_count == 0
        assert list(engine.snakes[0].body) == [(6, 9), (5, 9), (4, 9)]
        assert list(engine.snakes[1].body) == [(18, 9), (19, 9), (20, 9)]
        assert engine.snakes[0].direction == Direction.RIGHT
        assert engine.snakes[1].direction == Direction.LEFT
        assert not engine.snakes[0].grow_pending
        assert not engine.powerup_visible
        assert engine.powerup.position == INACTIVE
        assert engine.food.active
        assert not engine.snakes[0].occupies(engine.food.position)
        assert not engine.snakes[1].occupies(engine.food.position)

    def test_reset_restarts_powerup_gap(self, engine, clock):
        clock.advance(engine.powerup_gap - 1)
        engine.reset()
        clock.advance(1)
        engine.tick()
        assert not engine.powerup_visible


class TestEngineSerialization:
    def test_state_is_json_serializable(self, engine, clock):
        clock.advance(engine.powerup_gap)
        engine.tick()
        serialized = json.dumps(engine.get_state())
        assert isinstance(serialized, str)

    def test_state_structure(self, engine):
        state = engine.get_state()
        assert state["status"] == "running"
        assert state["running"] is True
        assert state["game_over"] is False
        assert state["scores"] == [0, 0]
        assert len(state["snakes"]) == 2
        assert state["powerup"]["visible"] is False
        assert state["food"]["position"] == list(FAR_CORNER)

    def test_events_in_state(self, engine):
        engine.food.position = engine.snakes[0].next_head()
        engine.tick()
        assert engine.get_state()["events"] == ["ate_food"]


class TestEngineDeterminism:
    def test_same_seed_same_outcome(self):
        actions = [Direction.UP, Direction.LEFT, Direction.DOWN, Direction.LEFT]
        assert self._run_game(7, actions) == self._run_game(7, actions)

    @staticmethod
    def _run_game(seed, actions):
        now = [0.0]
        eng = GameEngine(seed=seed, clock=lambda: now[0])
        for action in actions:
            eng.set_direction(0, action)
            now[0] += 5
            eng.tick()
        return eng.get_state()
