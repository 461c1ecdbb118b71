"""Signal scanner — application configuration.

Loads .env variables into a typed config object and parses indicator
strategy definitions (``scanner.json`` or a plain dict) into
``IndicatorConfig``.
"""

import json
import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Union

from dotenv import load_dotenv

from scanner.models.indicator_config import (
    INDICATOR_TYPES,
    PARAM_CLASSES,
    PARAM_FIELDS,
    IndicatorConfig,
)


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    log_level: str
    api_port: int
    window_size: int
    target_volume: float
    config_path: str


def _env_number(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Every variable is optional.  Raises ``ValueError`` naming the variable
    when a numeric value cannot be parsed.
    """
    load_dotenv(dotenv_path=env_path)

    return Config(
        log_level=os.environ.get("SCANNER_LOG_LEVEL", "INFO"),
        api_port=_env_number("SCANNER_API_PORT", "8080", int),
        window_size=_env_number("SCANNER_WINDOW_SIZE", "500", int),
        target_volume=_env_number("SCANNER_TARGET_VOLUME", "10.0", float),
        config_path=os.environ.get("SCANNER_CONFIG_PATH", "scanner.json"),
    )


# ── Indicator config parsing ─────────────────────────────────────────────

# camelCase spellings used by JSON clients that don't follow the
# mechanical camel → snake rule.
_KEY_ALIASES: dict[str, str] = {
    "indicatorType": "indicator_type",
    "priceEma": "price_ema",
    "stochRSI": "stoch_rsi",
    "emaPeriod1": "ema_fast",
    "emaPeriod2": "ema_slow",
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Parameter fields that must be positive integers.
_PERIOD_FIELDS = {"ema_fast", "ema_slow", "min_candles"}


def _snake(key: str) -> str:
    if key in _KEY_ALIASES:
        return _KEY_ALIASES[key]
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _parse_block(name: str, raw: dict):
    """Build the parameter dataclass *name* from a raw mapping."""
    if not isinstance(raw, dict):
        raise ValueError(f"'{name}' config must be a mapping, got {type(raw).__name__}")
    cls = PARAM_CLASSES[name]
    allowed = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in raw.items():
        field_name = _snake(key)
        if field_name not in allowed:
            raise ValueError(f"Unknown field '{key}' in '{name}' config")
        is_period = field_name.endswith("period") or field_name in _PERIOD_FIELDS
        if is_period:
            try:
                valid = not isinstance(value, bool) and int(value) == value and int(value) > 0
            except (OverflowError, TypeError, ValueError):
                valid = False
            if not valid:
                raise ValueError(
                    f"'{name}.{field_name}' must be a positive integer, got {value!r}"
                )
            value = int(value)
        else:
            value = float(value)
        kwargs[field_name] = value
    return cls(**kwargs)


def load_indicator_config(source: Union[dict, str, Path]) -> IndicatorConfig:
    """Parse an indicator strategy definition.

    Args:
        source: A mapping, or a path to a JSON file holding one.  Keys may
            be snake_case or camelCase (``indicatorType``, ``priceEma``,
            ``fastPeriod`` …).

    Raises:
        ValueError: a config or parameter block that is not a mapping,
            an unknown indicator type or field, or a period that is not a
            positive integer.
    """
    if isinstance(source, (str, Path)):
        data = json.loads(Path(source).read_text(encoding="utf-8"))
    else:
        data = source
    if not isinstance(data, dict):
        raise ValueError(f"Indicator config must be a mapping, got {type(data).__name__}")

    normalised = {_snake(k): v for k, v in data.items()}

    indicator_type = normalised.get("indicator_type")
    if indicator_type not in INDICATOR_TYPES:
        raise ValueError(
            f"Unknown indicator type {indicator_type!r}. "
            f"Available: {', '.join(INDICATOR_TYPES)}"
        )

    blocks = {}
    for name in PARAM_FIELDS.values():
        raw = normalised.get(name)
        if raw is not None:
            blocks[name] = _parse_block(name, raw)

    return IndicatorConfig(
        indicator_type=indicator_type,
        timeframe=str(normalised.get("timeframe", "1h")),
        **blocks,
    )
