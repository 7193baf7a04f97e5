"""Configuration loader for petz_py.

Behavior:
- Load defaults.
- If environment variable `PETZ_CONFIG` is set (or a path is passed), load
  that JSON file and merge.
- Environment variables override file values (variables: PETZ_DATA_DIR,
  PETZ_TEMPLATES_DIR, PETZ_MAX_GENERATIONS, PETZ_LOG_LEVEL), except when an
  explicit path is given.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import os
import json
import logging
from typing import Optional


DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


@dataclass
class Config:
    data_dir: Path = Path("data")
    templates_dir: Path = DEFAULT_TEMPLATES_DIR
    # upper bound accepted from callers; a pedigree has 2**(n+1) - 2 slots
    max_generations: int = 8
    log_level: str = "INFO"


def _load_json_file(path: Path) -> Optional[dict]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        logging.warning("Could not read config file %s", path)
        return None


def _parse_max_generations(value, default: int) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        logging.warning("Ignoring invalid max_generations %r", value)
        return default
    if n < 1:
        logging.warning("Ignoring non-positive max_generations %r", value)
        return default
    return n


_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


def _parse_log_level(value, default: str) -> str:
    level = str(value).upper()
    if level not in _LOG_LEVELS:
        logging.warning("Ignoring unknown log_level %r", value)
        return default
    return level


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from (1) defaults, (2) JSON file, (3) env vars.

    :param config_path: optional path to a JSON config file. If not provided
                        will use environment variable `PETZ_CONFIG` if set.
    """
    cfg = Config()

    cp = config_path or os.environ.get("PETZ_CONFIG")
    if cp:
        data = _load_json_file(Path(cp))
        if isinstance(data, dict):
            if data.get("data_dir"):
                cfg.data_dir = Path(data["data_dir"])
            if data.get("templates_dir"):
                cfg.templates_dir = Path(data["templates_dir"])
            if "max_generations" in data:
                cfg.max_generations = _parse_max_generations(data["max_generations"], cfg.max_generations)
            if data.get("log_level"):
                cfg.log_level = _parse_log_level(data["log_level"], cfg.log_level)

    # an explicit config_path is authoritative; env vars only apply otherwise
    if config_path is None:
        if os.environ.get("PETZ_DATA_DIR"):
            cfg.data_dir = Path(os.environ["PETZ_DATA_DIR"])
        if os.environ.get("PETZ_TEMPLATES_DIR"):
            cfg.templates_dir = Path(os.environ["PETZ_TEMPLATES_DIR"])
        if os.environ.get("PETZ_MAX_GENERATIONS"):
            cfg.max_generations = _parse_max_generations(os.environ["PETZ_MAX_GENERATIONS"], cfg.max_generations)
        if os.environ.get("PETZ_LOG_LEVEL"):
            cfg.log_level = _parse_log_level(os.environ["PETZ_LOG_LEVEL"], cfg.log_level)

    return cfg
