"""Layered configuration loading.

Layers, lowest priority first:

1. shipped defaults (``config/defaults.toml`` or an explicit path)
2. system file (``/etc/<app>/config.toml``, ``%PROGRAMDATA%\\<app>\\config.toml``)
3. user file (platformdirs user config dir)
4. environment: ``MIRROR_ME_<SECTION>__<KEY>``, ``__`` separating nesting levels

Mappings are merged key by key; any other value replaces the lower layer's.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar

import platformdirs
import toml
from pydantic import BaseModel, ValidationError

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)

ENV_NESTING_SEPARATOR = "__"
CONFIG_FILENAME = "config.toml"
DEFAULTS_FILENAME = "defaults.toml"


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``base`` updated with ``override``, merging nested mappings."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def convert_env_value(value: str) -> Any:
    """Interpret an environment string as bool, number, list or string."""
    lowered = value.strip().lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False

    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        pass

    if "," in value:
        return [item.strip() for item in value.split(",")]
    return value


class ConfigLoader(Generic[T]):
    """Builds one validated settings model from every configuration layer."""

    def __init__(self, app_name: str = "mirror-me", config_class: Optional[Type[T]] = None) -> None:
        self.app_name = app_name
        self.config_class = config_class

    @property
    def env_prefix(self) -> str:
        return f"{self.app_name.upper().replace('-', '_')}_"

    def load(self, defaults_path: Optional[Path] = None) -> T:
        """Merge all layers and validate the result.

        Args:
            defaults_path: Explicit defaults file; must exist when given

        Returns:
            Validated configuration object (plain dict without a config class)

        Raises:
            ConfigurationError: If a file is missing, unreadable or malformed,
                or the merged settings fail validation
        """
        layers = [
            ("defaults", self._load_defaults(defaults_path)),
            ("system", self._load_system_config()),
            ("user", self._load_user_config()),
            ("environment", self._env_overrides()),
        ]

        merged: Dict[str, Any] = {}
        for name, layer in layers:
            if layer:
                logger.debug(f"Applying {name} configuration ({', '.join(sorted(layer))})")
                merged = deep_merge(merged, layer)

        if self.config_class is None:
            return merged
        try:
            return self.config_class(**merged)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}", app_name=self.app_name) from e

    def default_paths(self) -> List[Path]:
        """Where shipped defaults are looked for when no path is given."""
        return [
            Path.cwd() / "config" / DEFAULTS_FILENAME,
            Path.home() / ".config" / self.app_name / DEFAULTS_FILENAME,
        ]

    def system_config_path(self) -> Path:
        if os.name == "nt":
            return Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData")) / self.app_name / CONFIG_FILENAME
        return Path("/etc") / self.app_name / CONFIG_FILENAME

    def user_config_path(self) -> Path:
        return Path(platformdirs.user_config_dir(appname=self.app_name, appauthor=False)) / CONFIG_FILENAME

    def _load_defaults(self, defaults_path: Optional[Path] = None) -> Dict[str, Any]:
        if defaults_path is not None:
            if not defaults_path.exists():
                raise ConfigurationError(f"Config file not found: {defaults_path}", path=str(defaults_path))
            return self._read_toml(defaults_path)

        for path in self.default_paths():
            if path.exists():
                return self._read_toml(path)
        logger.debug("No defaults file found, using model defaults")
        return {}

    def _load_system_config(self) -> Optional[Dict[str, Any]]:
        return self._read_optional(self.system_config_path())

    def _load_user_config(self) -> Optional[Dict[str, Any]]:
        return self._read_optional(self.user_config_path())

    def _read_optional(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        return self._read_toml(path)

    def _read_toml(self, path: Path) -> Dict[str, Any]:
        logger.debug(f"Reading config file {path}")
        try:
            return toml.load(path)
        except toml.TomlDecodeError as e:
            raise ConfigurationError(f"Malformed config file {path}: {e}", path=str(path)) from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}", path=str(path)) from e

    def _env_overrides(self, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """Nested overrides from variables such as ``MIRROR_ME_PROVIDERS__REDDIT__VOTES``."""
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for name, raw in environ.items():
            if not name.startswith(self.env_prefix):
                continue
            *sections, key = name[len(self.env_prefix):].lower().split(ENV_NESTING_SEPARATOR)
            node = overrides
            for section in sections:
                if not isinstance(node.get(section), dict):
                    node[section] = {}
                node = node[section]
            node[key] = convert_env_value(raw)
        return overrides
