"""Configuration loader with YAML and environment variable support.

This module reads ~/.config/notionedit/config.yaml and applies environment
variable overrides using the NOTIONEDIT_* prefix.

Environment variables:
- NOTIONEDIT_NOTION_TOKEN: Override notion.token
- NOTIONEDIT_NOTION_API_BASE_URL: Override notion.api_base_url
- NOTIONEDIT_EDITOR_MAX_RETRIES: Override editor.max_retries
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from notionedit.models.config import Config, read_config_file
from notionedit.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "notionedit" / "config.yaml"


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    A missing file is not an error as long as the environment (or explicit
    overrides) supply a token. When the file exists its permissions are
    checked by read_config_file().

    Args:
        config_path: Path to config file. If None, uses ~/.config/notionedit/config.yaml
        overrides: Section dicts applied last (CLI flags), e.g. {"notion": {"token": "..."}}

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If there is no config file and nothing else provides a token
        PermissionError: If the config file is group/world readable
        ValueError: If the configuration is invalid
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if config_path.exists():
        data = read_config_file(config_path)
        logger.debug("config_file_read", path=str(config_path))
    else:
        data = {}

    data = _apply_env_overrides(data)

    for section, values in (overrides or {}).items():
        data.setdefault(section, {}).update(
            {key: value for key, value in values.items() if value is not None}
        )

    if not data.get("notion", {}).get("token"):
        raise FileNotFoundError(
            f"Configuration file not found at {config_path} and NOTIONEDIT_NOTION_TOKEN is not set.\n"
            "Either create a config file, set the environment variable, or pass --token."
        )

    # Pydantic validates the structure
    return Config(**data)


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Environment variables use the format: NOTIONEDIT_SECTION_KEY
    For example: NOTIONEDIT_NOTION_TOKEN sets data['notion']['token']

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    # An empty section in YAML parses as None
    data["notion"] = data.get("notion") or {}
    data["editor"] = data.get("editor") or {}

    if env_token := os.getenv("NOTIONEDIT_NOTION_TOKEN"):
        data["notion"]["token"] = env_token

    if env_base_url := os.getenv("NOTIONEDIT_NOTION_API_BASE_URL"):
        data["notion"]["api_base_url"] = env_base_url

    if env_max_retries := os.getenv("NOTIONEDIT_EDITOR_MAX_RETRIES"):
        try:
            data["editor"]["max_retries"] = int(env_max_retries)
        except ValueError:
            logger.warning("config_env_override_ignored", variable="NOTIONEDIT_EDITOR_MAX_RETRIES", value=env_max_retries)

    return data
