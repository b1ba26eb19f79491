"""Configuration loading."""

from chatbridge.infrastructure.config.loader import apply_env_overrides, load_config

__all__ = ["apply_env_overrides", "load_config"]
