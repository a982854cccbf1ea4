"""Watcher configuration and loading helpers."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .comparator import DiffStyle
from .constants import CONFIG_FILE, CONFIG_SECTION, ENV_PREFIX
from .errors import ConfigError


class WatcherConfig(BaseModel):
    """Configuration for one watch cycle (registry-watcher.yaml)."""

    model_config = ConfigDict(frozen=True)

    # Registry to fetch snapshots from
    registry_host: str = Field("localhost", min_length=1)
    registry_port: int = Field(9229, ge=1, le=65535)
    registry_path: str = "/registry/list"

    # Directory to keep snapshots in
    local_path: Path = Path(".")

    # Timeouts in milliseconds, fetch only
    connect_timeout: int = Field(15000, gt=0)
    read_timeout: int = Field(15000, gt=0)

    # Notification
    notification_recipient_email: Optional[str] = None
    notification_sender_email: Optional[str] = None
    notification_subject: str = "DistributeMe registry watcher notification"
    diff_style: DiffStyle = DiffStyle.UNIFIED

    # Mail transport
    smtp_host: str = "localhost"
    smtp_port: int = Field(25, ge=1, le=65535)

    @field_validator("diff_style", mode="before")
    @classmethod
    def _normalize_diff_style(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("registry_path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        return value if value.startswith("/") else "/" + value

    @field_validator(
        "notification_subject", "notification_recipient_email", "notification_sender_email"
    )
    @classmethod
    def _single_line(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and ("\r" in value or "\n" in value):
            raise ValueError("must not contain line breaks")
        return value

    @property
    def server_address(self) -> str:
        """Registry address as host:port."""
        return f"{self.registry_host}:{self.registry_port}"


def _env_overrides() -> Dict[str, str]:
    """Collect REGISTRY_WATCHER_<FIELD> environment overrides."""
    overrides = {}
    for name in WatcherConfig.model_fields:
        value = os.environ.get(ENV_PREFIX + name.upper())
        if value is not None:
            overrides[name] = value
    return overrides


def load_config(path: Optional[Path] = None) -> WatcherConfig:
    """Load watcher configuration.

    Reads ``path`` if given, otherwise ``registry-watcher.yaml`` in the
    current directory when it exists. Settings may sit at the top level or
    under a ``registry_watcher`` section. Environment variables override
    file values.

    Args:
        path: Explicit configuration file

    Returns:
        Validated WatcherConfig

    Raises:
        ConfigError: If the file is missing, unparsable, or invalid
    """
    data: Dict[str, Any] = {}

    if path is not None and not Path(path).exists():
        raise ConfigError(f"Configuration file not found: {path}")

    cfg_path = Path(path) if path is not None else Path.cwd() / CONFIG_FILE
    if cfg_path.exists():
        try:
            data = yaml.safe_load(cfg_path.read_text()) or {}
        except (yaml.YAMLError, OSError) as e:
            raise ConfigError(f"Can not read configuration {cfg_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration {cfg_path} must be a mapping")
        data = data.get(CONFIG_SECTION, data) or {}

    data = {**data, **_env_overrides()}

    try:
        return WatcherConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
