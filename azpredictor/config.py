"""User configuration: ~/.azpredictor/config.json plus environment overrides."""
from __future__ import annotations

import json
import logging
import os

from azpredictor.telemetry.cohort import DEFAULT_COHORT_COUNT

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "AZPREDICTOR_CONFIG_DIR"
TELEMETRY_ENV = "AZPREDICTOR_TELEMETRY"
COHORT_COUNT_ENV = "AZPREDICTOR_COHORT_COUNT"

CONFIG_KEYS = ("telemetry", "cohort_count")


def get_config_dir() -> str:
    """Directory holding config.json."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return os.path.abspath(override)
    return os.path.join(os.path.expanduser("~"), ".azpredictor")


def get_config_path() -> str:
    return os.path.join(get_config_dir(), "config.json")


def load_config(config_path: str | None = None) -> dict:
    """Load config from file, returning empty dict if not found or invalid."""
    config_path = config_path or get_config_path()
    if not os.path.exists(config_path):
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.debug("Failed to load config %s: %s", config_path, e)
        return {}
    if not isinstance(data, dict):
        logger.debug("Ignoring non-object config in %s", config_path)
        return {}
    return data


def save_config(cfg: dict, config_path: str | None = None) -> None:
    """Save config to file."""
    config_path = config_path or get_config_path()
    os.makedirs(os.path.dirname(config_path), exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)


def telemetry_enabled(cfg: dict | None = None) -> bool:
    """Telemetry is on unless the config or AZPREDICTOR_TELEMETRY=off says otherwise."""
    cfg = load_config() if cfg is None else cfg
    env_override = os.environ.get(TELEMETRY_ENV, "").lower()
    return bool(cfg.get("telemetry", True)) and env_override != "off"


def cohort_count(cfg: dict | None = None) -> int:
    """Configured cohort count; invalid values fall back to the default."""
    cfg = load_config() if cfg is None else cfg
    raw = os.environ.get(COHORT_COUNT_ENV) or cfg.get("cohort_count", DEFAULT_COHORT_COUNT)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.debug("Invalid cohort_count %r, using %d", raw, DEFAULT_COHORT_COUNT)
        return DEFAULT_COHORT_COUNT
    if value <= 0:
        logger.debug("Non-positive cohort_count %r, using %d", raw, DEFAULT_COHORT_COUNT)
        return DEFAULT_COHORT_COUNT
    return value
