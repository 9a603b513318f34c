from __future__ import annotations
import argparse
import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from dotenv import load_dotenv

from .engine.errors import BoardConfigError
from .engine.state import BOARD_SIZE, MIN_BOARD_SIZE, WALLS_PER_PLAYER

ENV_PLAYERS = "QUORIDOR_PLAYERS"
ENV_BOARD_SIZE = "QUORIDOR_BOARD_SIZE"
ENV_NAMES = "QUORIDOR_NAMES"
ENV_LOG_LEVEL = "QUORIDOR_LOG_LEVEL"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class HotseatConfig:
    num_players: int = 2
    board_size: int = BOARD_SIZE
    names: List[str] = field(default_factory=list)
    log_level: str = "WARNING"

    def validate(self) -> "HotseatConfig":
        if self.num_players not in WALLS_PER_PLAYER:
            raise BoardConfigError(f"Only 2 or 4 players supported, got {self.num_players}")
        if self.board_size < MIN_BOARD_SIZE:
            raise BoardConfigError(
                f"Board size must be at least {MIN_BOARD_SIZE}, got {self.board_size}"
            )
        if len(self.names) > self.num_players:
            raise BoardConfigError(
                f"{len(self.names)} names given for {self.num_players} players"
            )
        names = self.player_names()
        if len({n.casefold() for n in names}) != len(names):
            raise BoardConfigError("Names must be different")
        if logging.getLevelName(self.log_level.upper()) not in (
            logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL
        ):
            raise BoardConfigError(f"Unknown log level: {self.log_level}")
        return self

    def player_names(self) -> List[str]:
        """Configured names, padded with "Player N" for unnamed seats."""
        return [
            self.names[i] if i < len(self.names) else f"Player {i + 1}"
            for i in range(self.num_players)
        ]


def _parse_int(value: str, what: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise BoardConfigError(f"{what} must be an integer, got {value!r}") from None


def _split_names(value: str) -> List[str]:
    return [n.strip() for n in value.split(",") if n.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Quoridor Hotseat")
    parser.add_argument("names", nargs="*", help="Player names in seat order (e.g. Ann Bob)")
    parser.add_argument("-n", "--players", type=int, default=None, help="Number of players (2 or 4)")
    parser.add_argument("-s", "--size", type=int, default=None, help="Board side length")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
    return parser


def load_config(
    argv: Optional[Sequence[str]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> HotseatConfig:
    """Resolve settings: command line first, then environment, then defaults.

    When ``env`` is not given the process environment is used, after loading
    a ``.env`` file from the working directory (existing variables win).
    """
    if env is None:
        load_dotenv()
        env = os.environ
    args = build_parser().parse_args(argv)

    cfg = HotseatConfig()
    if env.get(ENV_NAMES):
        cfg.names = _split_names(env[ENV_NAMES])
    if env.get(ENV_PLAYERS):
        cfg.num_players = _parse_int(env[ENV_PLAYERS], ENV_PLAYERS)
    elif cfg.names and len(cfg.names) in WALLS_PER_PLAYER:
        cfg.num_players = len(cfg.names)
    if env.get(ENV_BOARD_SIZE):
        cfg.board_size = _parse_int(env[ENV_BOARD_SIZE], ENV_BOARD_SIZE)
    if env.get(ENV_LOG_LEVEL):
        cfg.log_level = env[ENV_LOG_LEVEL]

    if args.names:
        cfg.names = list(args.names)
        if args.players is None:
            cfg.num_players = len(args.names)
    if args.players is not None:
        cfg.num_players = args.players
    if args.size is not None:
        cfg.board_size = args.size
    if args.log_level is not None:
        cfg.log_level = args.log_level
    return cfg.validate()


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
