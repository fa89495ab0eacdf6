"""Configuration management for mantle.

Configuration Discovery Precedence (Highest to Lowest Priority):
===============================================================

1. **MANTLE_CONFIG_DIR Environment Variable** (Highest Priority)
   - Looks for: `${MANTLE_CONFIG_DIR}/mantle.yaml`
   - Use case: Development, testing, custom deployments

2. **~/.mantle Directory** (Fallback)
   - Looks for: `~/.mantle/mantle.yaml`

If no `mantle.yaml` is found, default configuration is applied. Scalar
settings can also be set through `MANTLE_*` environment variables.

Example mantle.yaml:
--------
mantle:
  debug: true
  hooks:
    - myapp.hooks.request_logger
    - hook: myapp.hooks.require_role
      params:
        role: admin
"""

import importlib
import logging
import os
import threading
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mantle.exceptions import MantleConfigError
from mantle.service.hook import HookDefinition

logger = logging.getLogger(__name__)


class MantleConfig(BaseSettings):
    """Main configuration for mantle that reads from mantle.yaml."""

    model_config = SettingsConfigDict(
        env_prefix="MANTLE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Enable DEBUG logging for the mantle logger tree
    debug: bool = False

    # Global hooks (import paths or dict with hook path and params)
    # Example: ["myapp.hooks.audit", {"hook": "myapp.hooks.require_role", "params": {"role": "admin"}}]
    hooks: list[str | dict[str, Any]] = Field(default_factory=list)

    # Path to mantle config
    config_path: Path = Field(default_factory=lambda: Path("./mantle.yaml"))

    def load_hooks(self) -> list[HookDefinition]:
        """Load global hook definitions from their import paths.

        An import path may point to a HookDefinition, to a mapping with
        before/after/error keys, or to a factory called with the entry
        params that returns one of those.

        Returns:
            List of hook definitions in configuration order

        Raises:
            MantleConfigError: If a hook entry is invalid or cannot be imported
        """
        loaded_hooks: list[HookDefinition] = []
        for hook_entry in self.hooks:
            # Parse hook entry (string or dict format)
            if isinstance(hook_entry, str):
                hook_path = hook_entry
                params: dict[str, Any] = {}
            elif isinstance(hook_entry, dict):
                hook_path = hook_entry.get("hook", "")
                params = hook_entry.get("params") or {}
                if not hook_path:
                    raise MantleConfigError(f"Hook entry missing 'hook' key: {hook_entry}")
            else:
                raise MantleConfigError(f"Invalid hook entry type: {type(hook_entry)}")

            target = import_path(hook_path)
            if isinstance(target, HookDefinition | dict):
                if params:
                    raise MantleConfigError(f"Hook {hook_path} is not a factory and does not accept params")
            elif callable(target):
                target = target(**params)
            try:
                definition = HookDefinition.from_value(target)
            except TypeError as e:
                raise MantleConfigError(f"Hook {hook_path} did not resolve to a hook definition: {e}") from e

            loaded_hooks.append(definition)
            logger.debug(f"Loaded hook: {hook_path}" + (f" with params: {params}" if params else ""))
        return loaded_hooks

    @classmethod
    def from_yaml(cls, yaml_path: Path, **kwargs: Any) -> "MantleConfig":
        """Load configuration from a mantle.yaml file.

        Args:
            yaml_path: Path to the mantle.yaml file
            **kwargs: Additional keyword arguments

        Returns:
            MantleConfig instance

        Raises:
            MantleConfigError: If the file is not valid YAML
        """
        instance = cls(config_path=yaml_path, **kwargs)

        if not yaml_path.exists():
            return instance

        try:
            with yaml_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise MantleConfigError(f"Invalid YAML in {yaml_path}: {e}") from e

        mantle_data = data.get("mantle") or {}
        if not isinstance(mantle_data, dict):
            raise MantleConfigError(f"Invalid 'mantle' section in {yaml_path}: {type(mantle_data)}")

        if "debug" in mantle_data:
            instance.debug = bool(mantle_data["debug"])

        hooks_data = mantle_data.get("hooks") or []
        if not isinstance(hooks_data, list):
            raise MantleConfigError(f"Invalid 'hooks' list in {yaml_path}: {type(hooks_data)}")
        if hooks_data:
            instance.hooks = hooks_data

        return instance


def import_path(path: str) -> Any:
    """Import ``package.module.attr`` or ``package.module:attr``."""
    if ":" in path:
        module_path, attr = path.split(":", 1)
    elif "." in path:
        module_path, attr = path.rsplit(".", 1)
    else:
        raise MantleConfigError(f"Invalid import path: {path}")
    try:
        module = importlib.import_module(module_path)
        return getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise MantleConfigError(f"Failed to import {path}: {e}") from e


def configure_logging(config: MantleConfig) -> None:
    """Enable DEBUG logging for all mantle loggers when debug is set."""
    if not config.debug:
        return
    mantle_logger = logging.getLogger("mantle")
    mantle_logger.setLevel(logging.DEBUG)
    # Ensure mantle loggers have a handler so messages appear
    if not mantle_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(name)s:%(levelname)s: %(message)s"))
        mantle_logger.addHandler(handler)


# Global configuration instance
_config_instance: MantleConfig | None = None
_config_lock = threading.Lock()


def get_config() -> MantleConfig:
    """Get the configuration instance."""
    global _config_instance

    if _config_instance is None:
        with _config_lock:
            # Double-check locking pattern
            if _config_instance is None:
                env_config_dir = os.environ.get("MANTLE_CONFIG_DIR")
                if env_config_dir:
                    config_dir = Path(env_config_dir)
                    logger.info(f"Using config directory from environment: {config_dir}")
                else:
                    config_dir = Path.home() / ".mantle"

                yaml_path = config_dir / "mantle.yaml"
                if yaml_path.exists():
                    logger.info(f"Loading mantle config from: {yaml_path}")
                    _config_instance = MantleConfig.from_yaml(yaml_path)
                else:
                    logger.debug(f"mantle.yaml not found at {yaml_path}, using default config")
                    _config_instance = MantleConfig(config_path=yaml_path)

    return _config_instance


def set_config_instance(config: MantleConfig) -> None:
    """Set the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = config


def clear_config_instance() -> None:
    """Clear the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = None
