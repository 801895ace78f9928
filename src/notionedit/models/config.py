"""Configuration models for notionedit."""

from pydantic import BaseModel, Field, HttpUrl, field_validator
from pathlib import Path
import yaml
import os
import stat


class NotionConfig(BaseModel):
    """Configuration for the Notion API connection."""

    token: str = Field(
        ...,
        min_length=1,
        description="Notion integration token (secret_... or ntn_...)"
    )

    api_base_url: HttpUrl = Field(
        default="https://api.notion.com/v1",
        description="Notion REST API base URL"
    )

    notion_version: str = Field(
        default="2022-06-28",
        description="Value sent in the Notion-Version header"
    )

    timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Per-request timeout in seconds"
    )

    @field_validator('token')
    @classmethod
    def validate_token(cls, v: str) -> str:
        """Reject whitespace-only tokens."""
        if not v.strip():
            raise ValueError(
                "notion.token is required (set it in config.yaml, "
                "NOTIONEDIT_NOTION_TOKEN, or --token)"
            )
        return v.strip()

    model_config = {"frozen": True}


class EditorConfig(BaseModel):
    """Configuration for the edit session (retry behaviour, indicators)."""

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Automatic retries for a save that fails transiently"
    )

    retry_base_delay: float = Field(
        default=1.0,
        gt=0.0,
        description="Delay before the first retry, in seconds"
    )

    retry_max_delay: float = Field(
        default=10.0,
        gt=0.0,
        description="Upper bound for any single retry delay, in seconds"
    )

    indicator_duration: float = Field(
        default=1.5,
        ge=0.0,
        description="How long 'Saved!' and 'Refreshed' stay in the status bar"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for notionedit."""

    notion: NotionConfig = Field(..., description="Notion API settings")
    editor: EditorConfig = Field(default_factory=EditorConfig, description="Edit session settings")

    model_config = {"frozen": True}


def read_config_file(path: Path) -> dict:
    """
    Read the raw YAML mapping from a config file.

    Validates file permissions before loading.
    Raises PermissionError if file is group/world readable.

    Args:
        path: Path to config.yaml file

    Returns:
        Parsed mapping (empty dict for an empty file)

    Raises:
        PermissionError: If file permissions are too open
        FileNotFoundError: If config file doesn't exist
        ValueError: If the YAML document is not a mapping
    """
    if not path.exists():
        raise FileNotFoundError(
            f"Configuration file not found at {path}\n\n"
            f"Please create the file with the following format:\n\n"
            f"notion:\n"
            f"  token: YOUR_INTEGRATION_TOKEN\n\n"
            f"editor:\n"
            f"  max_retries: 3\n"
        )

    # The file holds an API token: must be 600
    mode = os.stat(path).st_mode
    if mode & (stat.S_IRWXG | stat.S_IRWXO):
        raise PermissionError(
            f"Config file has overly permissive permissions: {oct(mode)}\n"
            f"Run: chmod 600 {path}"
        )

    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a YAML mapping: {path}")
    return data
