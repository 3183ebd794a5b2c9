"""CLI launcher for Duel Snake."""

from __future__ import annotations

import argparse
import logging
import sys

from duel_snake.config import GameConfig, RulesConfig

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="duel-snake",
        description="Two-player snake with power-ups.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- play ---
    play_p = sub.add_parser("play", help="Open the game window.")
    play_p.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON config file; flags override its values.",
    )
    play_p.add_argument("--tick-interval", type=float, default=None)
    play_p.add_argument("--fps", type=int, default=None)
    play_p.add_argument("--seed", type=int, default=None)
    play_p.add_argument(
        "--asset-dir", type=str, default=None,
        help="Directory holding Graphics/ and Sounds/ (default: current directory).",
    )
    play_p.add_argument(
        "--mute", action="store_true", default=None, help="Disable sound.",
    )

    # --- init-config ---
    init_p = sub.add_parser(
        "init-config", help="Write the default config to a JSON file.",
    )
    init_p.add_argument("path", help="Where to write the config.")

    return parser


def _resolve_config(args: argparse.Namespace) -> GameConfig:
    config = GameConfig.load(args.config) if args.config else GameConfig()

    overrides: dict = {}
    flag_map = {
        "tick_interval": "tick_interval",
        "fps": "fps",
        "seed": "seed",
        "asset_dir": "asset_dir",
        "mute": "mute",
    }
    for cli_name, cfg_name in flag_map.items():
        val = getattr(args, cli_name, None)
        if val is not None:
            overrides[cfg_name] = val

    if overrides:
        d = config.to_dict()
        d.update(overrides)
        rules_data = d.pop("rules", {})
        config = GameConfig(**d, rules=RulesConfig(**rules_data))
    return config


def _run_play(args: argparse.Namespace) -> int:
    try:
        config = _resolve_config(args)
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    from duel_snake.app import SnakeApp

    SnakeApp(config).run()
    return 0


def _run_init_config(args: argparse.Namespace) -> int:
    GameConfig().save(args.path)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``duel-snake`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "play": _run_play,
        "init-config": _run_init_config,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
