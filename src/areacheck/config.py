"""Server configuration: route, input grid and session table sizing.

All values are fixed for the life of the process. Defaults match the
deployed form; any of them can be overridden from the environment:

    AREACHECK_SCRIPT_NAME   route the gateway must report (SCRIPT_NAME)
    AREACHECK_X_MIN         lower bound for x
    AREACHECK_X_MAX         upper bound for x
    AREACHECK_ALLOWED_Y     comma-separated allowed y values
    AREACHECK_ALLOWED_R     comma-separated allowed r values
    AREACHECK_TOLERANCE     absolute tolerance for y/r matching
    AREACHECK_MAX_HISTORY   per-session cap (unset = unbounded)
    AREACHECK_STRIPES       session table lock stripes (power of 2)
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from areacheck.domain.validator import (
    ALLOWED_R,
    ALLOWED_Y,
    TOLERANCE,
    X_MAX,
    X_MIN,
    CoordinatesValidator,
)

ENV_PREFIX = "AREACHECK_"
DEFAULT_SCRIPT_NAME = "/fcgi-bin/app.jar"


class ConfigError(ValueError):
    """Raised when a configuration value cannot be parsed or is inconsistent."""


@dataclass(frozen=True, slots=True)
class ServerConfig:
    script_name: str = DEFAULT_SCRIPT_NAME
    x_min: float = X_MIN
    x_max: float = X_MAX
    allowed_y: tuple[float, ...] = ALLOWED_Y
    allowed_r: tuple[float, ...] = ALLOWED_R
    tolerance: float = TOLERANCE
    max_history: int | None = None
    num_stripes: int = 16

    def __post_init__(self) -> None:
        if self.x_min > self.x_max:
            raise ConfigError(f"x_min {self.x_min} is greater than x_max {self.x_max}")
        if not self.allowed_y:
            raise ConfigError("allowed_y must not be empty")
        if not self.allowed_r:
            raise ConfigError("allowed_r must not be empty")
        if self.tolerance <= 0:
            raise ConfigError("tolerance must be positive")
        if self.max_history is not None and self.max_history <= 0:
            raise ConfigError("max_history must be positive")
        if self.num_stripes <= 0 or (self.num_stripes & (self.num_stripes - 1)) != 0:
            raise ConfigError("num_stripes must be a positive power of 2")

    def build_validator(self) -> CoordinatesValidator:
        return CoordinatesValidator(
            x_min=self.x_min,
            x_max=self.x_max,
            allowed_y=self.allowed_y,
            allowed_r=self.allowed_r,
            tolerance=self.tolerance,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerConfig:
        """Build a config from AREACHECK_* variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}
        for name, (field_name, parse) in _ENV_FIELDS.items():
            value = env.get(ENV_PREFIX + name)
            if value is None or not value.strip():
                continue
            kwargs[field_name] = parse(name, value.strip())
        return cls(**kwargs)


def _parse_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{name}: not a number: {value!r}") from None


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{name}: not an integer: {value!r}") from None


def _parse_float_list(name: str, value: str) -> tuple[float, ...]:
    return tuple(
        _parse_float(name, part.strip()) for part in value.split(",") if part.strip()
    )


def _parse_str(name: str, value: str) -> str:
    return value


# env suffix -> (ServerConfig field, parser)
_ENV_FIELDS = {
    "SCRIPT_NAME": ("script_name", _parse_str),
    "X_MIN": ("x_min", _parse_float),
    "X_MAX": ("x_max", _parse_float),
    "ALLOWED_Y": ("allowed_y", _parse_float_list),
    "ALLOWED_R": ("allowed_r", _parse_float_list),
    "TOLERANCE": ("tolerance", _parse_float),
    "MAX_HISTORY": ("max_history", _parse_int),
    "STRIPES": ("num_stripes", _parse_int),
}
