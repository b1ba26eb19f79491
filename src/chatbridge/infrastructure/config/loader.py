"""Load ``BridgeConfig`` from YAML plus environment overrides."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from chatbridge.core.domain.config_schema import BridgeConfig
from chatbridge.core.domain.errors import ConfigError, ErrorCode

logger = structlog.get_logger(__name__)

# env var -> (section, field)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "LOG_LEVEL": ("logging", "level"),
    "CHATBRIDGE_REPO_PATH": ("workspace", "repo_path"),
    "CHATBRIDGE_WORKSPACES_DIR": ("workspace", "workspaces_dir"),
    "CHATBRIDGE_SEARCH_LIMIT": ("memory", "search_limit"),
}


def _coerce_env_value(value: str) -> Any:
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if value.isdigit():
        return int(value)
    return value


def apply_env_overrides(
    data: dict[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Return a copy of ``data`` with environment overrides applied."""
    env = os.environ if environ is None else environ
    merged = {section: dict(values) for section, values in data.items()}
    for name, (section, field) in ENV_OVERRIDES.items():
        raw = env.get(name)
        if raw is None or raw == "":
            continue
        merged.setdefault(section, {})[field] = _coerce_env_value(raw)
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(
            f"Config file not found: {path}",
            code=ErrorCode.CONFIG_NOT_FOUND,
            details={"path": str(path)},
        )
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(
            f"Invalid YAML in {path}: {exc}",
            code=ErrorCode.CONFIG_INVALID,
            details={"path": str(path)},
        ) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config root must be a mapping: {path}",
            code=ErrorCode.CONFIG_INVALID,
            details={"path": str(path)},
        )
    return data


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> BridgeConfig:
    """
    Load and validate the bridge configuration.

    Args:
        path: YAML file to read. ``None`` means defaults only.
        environ: Environment to read overrides from (defaults to ``os.environ``).

    Raises:
        ConfigError: ``CONFIG_NOT_FOUND`` for a missing file,
            ``CONFIG_INVALID`` for bad YAML or schema violations.
    """
    data = _read_yaml(Path(path)) if path is not None else {}
    for section, values in data.items():
        if not isinstance(values, dict):
            raise ConfigError(
                f"Config section '{section}' must be a mapping",
                code=ErrorCode.CONFIG_INVALID,
                details={"section": section},
            )

    merged = apply_env_overrides(data, environ)
    try:
        config = BridgeConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid configuration: {exc}",
            code=ErrorCode.CONFIG_INVALID,
            details={"path": str(path) if path else None, "error_count": exc.error_count()},
        ) from exc

    logger.debug("config.loaded", path=str(path) if path else None)
    return config
