"""
RSML Configuration Management
=============================

Layered configuration for the compiler and its command-line tools.

Configuration Loading Priority (highest to lowest):
1. Runtime overrides (Config.set, command-line flags)
2. Environment variables (RSML_*)
3. Python config file (rsml_config.py or --config FILE)
4. Default values

Environment variables use a double underscore between levels:
    RSML_COMPILER__CRATE_PATH=my_ui   ->  compiler.crate_path = "my_ui"
    RSML_COMPILER__STRICT=1           ->  compiler.strict = True

Example:
    # rsml_config.py
    config = {
        "compiler": {
            "crate_path": "hyprui",
            "boolean_methods": ["h_fit"],
        },
    }

    config = Config()
    config.load_file("rsml_config.py")
    config.load_env()
    strict = config.get_bool("compiler.strict")
"""

from __future__ import annotations

import copy
import importlib.util
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, TypeVar, Union

T = TypeVar("T")

ENV_PREFIX = "RSML_"

DEFAULTS: Dict[str, Any] = {
    "compiler": {
        "crate_path": "hyprui",
        "boolean_methods": [],
        "strict": False,
        "merge_text": True,
    },
    "logging": {
        "level": "warning",
        "format": "text",
    },
}


class ConfigError(Exception):
    """Raised when a configuration source cannot be loaded."""
    pass


@dataclass
class ConfigSource:
    """Represents a configuration source with priority."""
    name: str
    data: Dict[str, Any]
    priority: int = 0


class Config:
    """
    Configuration container.

    Merges prioritized sources and gives dot-notation access to nested
    values.

    Example:
        config = Config()
        config.set("compiler.strict", True)

        config.get("compiler.crate_path")         # "hyprui"
        config.get_bool("compiler.strict")        # True
        config.get("compiler.missing", "default") # "default"
    """

    def __init__(self, defaults: Optional[Dict[str, Any]] = None) -> None:
        self._sources: List[ConfigSource] = []
        self._merged: Dict[str, Any] = {}
        self._dirty = True

        base = DEFAULTS if defaults is None else defaults
        self.add_source("defaults", copy.deepcopy(base), priority=0)

    def load_file(self, path: Union[str, Path]) -> None:
        """
        Load configuration from a Python file.

        Uses the module's `config` dict if it defines one, otherwise every
        public top-level name.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        spec = importlib.util.spec_from_file_location("rsml_user_config", path)
        if spec is None or spec.loader is None:
            raise ConfigError(f"Cannot load config file: {path}")

        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        if hasattr(module, "config"):
            data = module.config
        else:
            data = {
                key: value
                for key, value in vars(module).items()
                if not key.startswith("_")
            }

        if not isinstance(data, dict):
            raise ConfigError(f"Config in {path} must be a dict")
        self.add_source(f"file:{path}", data, priority=10)

    def load_env(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Load overrides from RSML_* environment variables."""
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        for key, value in environ.items():
            if key.startswith(ENV_PREFIX):
                # RSML_COMPILER__CRATE_PATH -> compiler.crate_path
                config_key = key[len(ENV_PREFIX):].lower().replace("__", ".")
                overrides[config_key] = self._parse_env_value(value)

        if overrides:
            self.add_source("env_vars", self._unflatten(overrides), priority=100)

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ("true", "yes", "1"):
            return True
        if value.lower() in ("false", "no", "0"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _unflatten(self, flat: Dict[str, Any]) -> Dict[str, Any]:
        """Convert flat dot-notation keys to nested dict."""
        result: Dict[str, Any] = {}

        for key, value in flat.items():
            parts = key.split(".")
            current = result
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

        return result

    def add_source(
        self,
        name: str,
        data: Dict[str, Any],
        priority: int = 0,
    ) -> None:
        """Add a configuration source."""
        self._sources.append(ConfigSource(name=name, data=data, priority=priority))
        self._dirty = True

    def _merge(self) -> None:
        """Merge all sources into single configuration."""
        if not self._dirty:
            return

        # Lower priority first, so higher overrides
        self._merged = {}
        for source in sorted(self._sources, key=lambda s: s.priority):
            self._deep_merge(self._merged, copy.deepcopy(source.data))

        self._dirty = False

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: T = None) -> Union[Any, T]:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "compiler.strict")
            default: Default value if key not found
        """
        self._merge()

        current: Any = self._merged
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "yes", "1")
        return bool(value)

    def get_list(self, key: str, default: Optional[List] = None) -> List:
        """Get value as list; comma-separated strings are split."""
        value = self.get(key, default)
        if value is None:
            return default or []
        if isinstance(value, (list, tuple, set, frozenset)):
            return list(value)
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return [value]

    def set(self, key: str, value: Any) -> None:
        """
        Set a runtime configuration value.

        Runtime values have the highest priority.
        """
        runtime_source = None
        for source in self._sources:
            if source.name == "runtime":
                runtime_source = source
                break

        if runtime_source is None:
            runtime_source = ConfigSource(name="runtime", data={}, priority=1000)
            self._sources.append(runtime_source)

        parts = key.split(".")
        current = runtime_source.data
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value

        self._dirty = True

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def all(self) -> Dict[str, Any]:
        """Get all configuration as dict."""
        self._merge()
        return copy.deepcopy(self._merged)

    def section(self, prefix: str) -> Dict[str, Any]:
        """Get all values under a prefix."""
        value = self.get(prefix)
        if isinstance(value, dict):
            return copy.deepcopy(value)
        return {}

    def __getitem__(self, key: str) -> Any:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return self.has(key)
