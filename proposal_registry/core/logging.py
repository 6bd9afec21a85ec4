"""Logging setup shared by the API, the scripts and the tests."""
from __future__ import annotations

import logging.config
from pathlib import Path

import yaml

DEFAULT_CONFIG = Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"


def configure_logging(config_path: Path = DEFAULT_CONFIG) -> None:
    """Apply the YAML ``dictConfig`` at ``config_path``; plain INFO logging when it is missing."""
    if not config_path.exists():
        logging.basicConfig(level=logging.INFO)
        return
    logging.config.dictConfig(yaml.safe_load(config_path.read_text(encoding="utf-8")))
