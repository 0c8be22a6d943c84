"""
Logging setup for the TopicLink API.

Reads the `logging` section of config.yaml (`level`, `format`, `file`,
`loggers`); `LOG_LEVEL` in the environment overrides `level`.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict

from src.common.config_utils import CONFIG_PATH, get_section

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _level(value: Any, fallback: str = "INFO") -> str:
    return str(value or fallback).upper()


def _file_handler(path: str, level: str) -> Dict[str, Any]:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    return {
        "class": "logging.FileHandler",
        "formatter": "standard",
        "level": level,
        "filename": path,
        "encoding": "utf-8",
    }


def build_logging_config(config_path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Return the dictConfig mapping for config.yaml plus the environment."""
    section = get_section("logging", config_path)
    root_level = _level(os.getenv("LOG_LEVEL") or section.get("level"))

    handlers: Dict[str, Any] = {
        "console": {"class": "logging.StreamHandler", "formatter": "standard", "level": root_level},
    }
    if section.get("file"):
        handlers["file"] = _file_handler(section["file"], root_level)

    # Per-logger levels, e.g. {"sqlalchemy.engine": "warning"}
    loggers = {
        name: {"level": _level(level)}
        for name, level in (section.get("loggers") or {}).items()
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"standard": {"format": section.get("format", DEFAULT_LOG_FORMAT)}},
        "handlers": handlers,
        "loggers": loggers,
        "root": {"level": root_level, "handlers": list(handlers)},
    }


def setup_logging(config_path: str = CONFIG_PATH) -> None:
    logging.config.dictConfig(build_logging_config(config_path))
