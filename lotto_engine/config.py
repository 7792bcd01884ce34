"""
Lotto Engine Configuration
==========================

Tunable engine constants loaded from ``config/config.ini`` (section
``[engine]``) with ``LOTTO_ENGINE_*`` environment overrides.

The game rules themselves (1-45 domain, 6-number tickets, prize table) are
not configurable.
"""

import configparser
import os
from dataclasses import dataclass, fields, replace
from typing import Optional

from loguru import logger

# Fixed game rules
MIN_NUMBER = 1
MAX_NUMBER = 45
TICKET_SIZE = 6

ENV_PREFIX = "LOTTO_ENGINE_"
CONFIG_SECTION = "engine"


@dataclass(frozen=True)
class EngineConfig:
    """Tunable parameters of the generation-and-scoring engine"""
    window_size: int = 20                 # frequency-window strategy lookback
    lookback_window: int = 100            # co-occurrence starter lookback
    max_resample_attempts: int = 1000     # odd-even / sum / zone balance loops
    sum_range_min: int = 100
    sum_range_max: int = 200
    gap_overdue_factor: float = 1.2
    hot_pair_min_count: int = 5
    hot_pair_limit: int = 10
    hot_triplet_min_count: int = 3
    hot_triplet_limit: int = 5
    delta_top_patterns: int = 100
    delta_start_max: int = 20
    blend_ticket_count: int = 5
    blend_max_attempts: int = 500
    blend_safe_window: int = 100
    blend_balanced_window: int = 50
    near_duplicate_overlap: int = 4
    cooccurrence_top_n: int = 3
    oversample_factor: int = 10
    payout_iterations: int = 1_000_000
    payout_batch_size: int = 100_000
    payout_workers: int = 4
    aesthetic_min_variance: float = 50.0


def _coerce(raw: str, target_type: type, name: str):
    try:
        if target_type is int:
            return int(raw.replace("_", ""))
        if target_type is float:
            return float(raw)
        return raw
    except ValueError:
        logger.warning(f"Ignoring invalid value for '{name}': {raw!r}")
        return None


def _default_config_path() -> str:
    current_dir = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(current_dir, "..", "config", "config.ini")


def load_config(path: Optional[str] = None) -> EngineConfig:
    """
    Build an EngineConfig from the INI file and the environment.

    Args:
        path: INI file path; defaults to ``config/config.ini`` in the repo root

    Returns:
        EngineConfig with file values applied first, then env overrides
    """
    config_path = path or _default_config_path()
    overrides = {}
    types = {f.name: type(f.default) for f in fields(EngineConfig)}

    parser = configparser.ConfigParser()
    try:
        read_ok = parser.read(config_path)
        if not read_ok or not parser.has_section(CONFIG_SECTION):
            logger.warning(f"Config section '{CONFIG_SECTION}' not found in {config_path}, using defaults")
        else:
            for key, raw in parser.items(CONFIG_SECTION):
                if key not in types:
                    logger.warning(f"Unknown engine config option '{key}' ignored")
                    continue
                value = _coerce(raw, types[key], key)
                if value is not None:
                    overrides[key] = value
    except (configparser.Error, OSError) as e:
        logger.error(f"Error reading config file: {e}. Using default engine configuration.")

    for name, target_type in types.items():
        raw = os.getenv(ENV_PREFIX + name.upper())
        if raw is None:
            continue
        value = _coerce(raw, target_type, ENV_PREFIX + name.upper())
        if value is not None:
            overrides[name] = value

    config = replace(EngineConfig(), **overrides)
    logger.debug(f"Engine config loaded ({len(overrides)} overrides)")
    return config


_config = None


def get_config() -> EngineConfig:
    """Process-wide default configuration, loaded on first use"""
    global _config

    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached default so the next get_config() reloads it"""
    global _config
    _config = None
