"""Launcher configuration."""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_AUTH_SERVER = "https://littleskin.cn/api/yggdrasil/authserver"


class LauncherConfig(BaseModel):
    """Values the launcher needs at install and launch time.

    ``javaversions`` maps a Java major version ("17", "21", ...) to the
    executable that should run the game.
    """
    model_config = ConfigDict(populate_by_name=True)

    java_versions: Dict[str, str] = Field(default_factory=dict, alias="javaversions")
    launcher_name: str = "craftlaunch"
    launcher_version: str = "27"
    client_id: str = "112321"
    auth_xuid: str = "114514"
    user_type: str = "mojang"
    resolution_width: int = 854
    resolution_height: int = 480
    auth_server: str = DEFAULT_AUTH_SERVER
    concurrent_downloads: int = Field(default=8, ge=1)
    request_delay: float = Field(default=0.0, ge=0)


def load_config(path: Optional[Union[str, Path]] = None) -> LauncherConfig:
    """Read the JSON configuration file, using defaults when it is missing."""
    path = Path(path or DEFAULT_CONFIG_FILE)
    if not path.exists():
        logger.info("No configuration at %s, using defaults", path)
        return LauncherConfig()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return LauncherConfig.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(f"invalid configuration {path}: {e}") from e
