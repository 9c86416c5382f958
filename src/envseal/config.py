"""
Run-level configuration.

Lives in ``<ENVSEAL_HOME>/config.yaml``. Missing or broken files fall
back to defaults so a bare ``envseal push`` always works.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from . import ENVSEAL_HOME

logger = logging.getLogger("envseal.config")

CONFIG_FILENAME = "config.yaml"
DEFAULT_API_URL = "https://api.github.com"


class EnvsealConfig(BaseModel):
    """Knobs for talking to the secret store."""

    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    backoff_seconds: float = Field(default=1.0, ge=0)
    workers: int = Field(default=1, ge=1)
    token_env_var: str = "GITHUB_TOKEN"

    def resolve_token(self, explicit: Optional[str] = None) -> Optional[str]:
        """Pick the credential: explicit value first, then the environment."""
        if explicit:
            return explicit
        return os.environ.get(self.token_env_var) or None


def home_path(home: Optional[str] = None) -> Path:
    return Path(home or ENVSEAL_HOME).expanduser()


def load_config(home: Optional[Path] = None) -> EnvsealConfig:
    """Load configuration from disk.

    Args:
        home: envseal home directory. Defaults to ENVSEAL_HOME.

    Returns:
        The parsed config, or defaults if the file is absent or invalid.
    """
    config_file = (home or home_path()) / CONFIG_FILENAME
    if config_file.exists():
        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
            return EnvsealConfig(**data)
        except (yaml.YAMLError, ValueError, TypeError) as exc:
            logger.warning("Failed to load config %s: %s", config_file, exc)
    return EnvsealConfig()


def save_config(config: EnvsealConfig, home: Optional[Path] = None) -> Path:
    """Persist configuration to disk.

    Returns:
        Path of the written file.
    """
    target = home or home_path()
    target.mkdir(parents=True, exist_ok=True)
    config_file = target / CONFIG_FILENAME
    config_file.write_text(
        yaml.dump(config.model_dump(mode="json"), default_flow_style=False),
        encoding="utf-8",
    )
    logger.info("Config saved: %s", config_file)
    return config_file
