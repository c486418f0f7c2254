"""
Table configuration.

Every field can be overridden from the environment with a ``TRUMPSWAP_``
prefixed variable, e.g. ``TRUMPSWAP_STARTING_STACK=500``.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from .errors import GameConfigError

ENV_PREFIX = "TRUMPSWAP_"
DECK_SIZE = 52
BURNS_PER_HAND = 3
COMMUNITY_SIZE = 7


@dataclass
class TableConfig:
    max_seats: int = 6
    min_seats: int = 2
    starting_stack: int = 1000
    hand_size: int = 7
    swap_cost_ratio: float = 0.5
    log_size: int = 40
    bot_delay: float = 0.8
    trick_pause: float = 2.0
    random_seed: Optional[int] = None

    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.min_seats < 2:
            raise GameConfigError(f"min_seats must be at least 2: {self.min_seats}")
        if self.max_seats < self.min_seats:
            raise GameConfigError(
                f"max_seats ({self.max_seats}) is below min_seats ({self.min_seats})"
            )
        if self.hand_size < 1:
            raise GameConfigError(f"hand_size must be positive: {self.hand_size}")
        needed = self.max_seats * self.hand_size + BURNS_PER_HAND + COMMUNITY_SIZE
        if needed > DECK_SIZE:
            raise GameConfigError(
                f"{self.max_seats} seats x {self.hand_size} cards needs {needed} cards, "
                f"deck has {DECK_SIZE}"
            )
        if self.starting_stack <= 0:
            raise GameConfigError(f"starting_stack must be positive: {self.starting_stack}")
        if not 0 < self.swap_cost_ratio <= 1:
            raise GameConfigError(f"swap_cost_ratio must be in (0, 1]: {self.swap_cost_ratio}")
        if self.log_size < 1:
            raise GameConfigError(f"log_size must be positive: {self.log_size}")
        if self.bot_delay < 0 or self.trick_pause < 0:
            raise GameConfigError("bot delays cannot be negative")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TableConfig":
        environ = os.environ if environ is None else environ
        kwargs = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            kwargs[f.name] = _coerce(f.name, f.default, raw)
        return cls(**kwargs)


def _coerce(name: str, default: object, raw: str) -> object:
    try:
        if name == "random_seed":
            return int(raw) if raw.strip() else None
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError as exc:
        raise GameConfigError(f"invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from exc
    return raw
