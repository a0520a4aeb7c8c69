"""Runtime configuration for the moderation pipeline.

Settings come from an optional YAML file (explicit path or ``$CMOD_CONFIG``)
with ``CMOD_*`` environment variables applied on top.  Example::

    warn_threshold: 3
    delete_threshold: 5
    dedupe_reporters: false
    store_dir: ~/.cmod/store
    notification_webhook_url: https://notify.example.com/hooks/cmod
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from cmod.errors import ConfigError

_ENV_OVERRIDES = {
    "CMOD_WARN_THRESHOLD": ("warn_threshold", int),
    "CMOD_DELETE_THRESHOLD": ("delete_threshold", int),
    "CMOD_DEDUPE_REPORTERS": ("dedupe_reporters", "bool"),
    "CMOD_SWEEP_PAGE_SIZE": ("sweep_page_size", int),
    "CMOD_STORE_DIR": ("store_dir", str),
    "CMOD_ADMIN_RECIPIENT": ("admin_recipient", str),
    "CMOD_NOTIFICATION_WEBHOOK_URL": ("notification_webhook_url", str),
    "CMOD_NOTIFICATION_WEBHOOK_SECRET": ("notification_webhook_secret", str),
    "CMOD_LOG_LEVEL": ("log_level", str),
}

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ModerationConfig:
    """Thresholds and policy toggles for moderation decisions."""

    warn_threshold: int = 3
    delete_threshold: int = 5
    # Count repeated reports from the same reporter only once.
    dedupe_reporters: bool = False
    sweep_page_size: int = 100
    classification_timeout: float = 2.0
    store_dir: str = str(Path.home() / ".cmod" / "store")
    admin_recipient: str = ""
    # When set, notifications are POSTed here instead of written to the store.
    notification_webhook_url: str = ""
    notification_webhook_secret: str = ""
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        for name in ("warn_threshold", "delete_threshold"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")
        if self.warn_threshold > self.delete_threshold:
            raise ConfigError(
                f"warn_threshold ({self.warn_threshold}) must not exceed "
                f"delete_threshold ({self.delete_threshold})"
            )
        if self.sweep_page_size < 1:
            raise ConfigError("sweep_page_size must be at least 1")
        if self.classification_timeout <= 0:
            raise ConfigError("classification_timeout must be positive")


def _coerce(value: str, kind: Any) -> Any:
    if kind == "bool":
        return value.strip().lower() in _TRUTHY
    try:
        return kind(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid value {value!r}: {exc}") from exc


def load_config(path: Optional[str | Path] = None) -> ModerationConfig:
    """Load configuration from YAML and the environment."""
    data: dict[str, Any] = {}
    path = path or os.environ.get("CMOD_CONFIG")
    if path:
        config_path = Path(path).expanduser()
        if config_path.exists():
            try:
                with open(config_path) as f:
                    loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Failed to parse {config_path}: {exc}") from exc
            if not isinstance(loaded, dict):
                raise ConfigError(f"{config_path} must contain a mapping")
            data.update(loaded)

    for env_name, (key, kind) in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw is not None:
            data[key] = _coerce(raw, kind)

    known = {f.name for f in fields(ModerationConfig)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    if "store_dir" in data:
        data["store_dir"] = str(Path(data["store_dir"]).expanduser())
    return ModerationConfig(**data)


def configure_logging(level: str = "INFO") -> None:
    """Route ``cmod.*`` loggers through rich for terminal use."""
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
    )
