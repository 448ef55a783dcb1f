"""
ConfigManager: YAML-backed game tuning access for Starfall.

Purpose
-------
- Provide hierarchical, dot-notation access to tunable game values
  (starting HP, starting pack, currency code, telemetry event names).
- Back configuration with built-in defaults deep-merged with YAML files
  found under the configured `config/` directory.

Key Design Decisions
--------------------
- Built-in `DEFAULTS` keep the engine runnable without any YAML on disk.
- YAML files are merged in sorted path order so composition is deterministic.
- The manager is an instance handed to services; tests build one from a
  plain dict via `ConfigManager.from_dict()`.

Dependencies
------------
- PyYAML for parsing `*.yaml` / `*.yml`.
- `starfall.core.config.config.Config` for the config directory.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

import yaml

from starfall.core.config.config import Config
from starfall.core.logging.logger import get_logger

logger = get_logger(__name__)


DEFAULTS: Dict[str, Any] = {
    "progression": {
        "starting_level": 1,
        "starting_experience": 0,
        "starting_hp": 100,
        "starting_pack_item": "StartingPack",
        "currency_code": "CR",
        "unpack_class_name": "unpack",
        "catalog_version": None,
    },
    "telemetry": {
        "combat_event": "killed_enemy_group",
        "travel_event": "returned_to_home_base",
        "equip_event": "equipped_item",
    },
}


class ConfigManager:
    """
    Dot-notation access to game tuning values.

    Usage
    -----
    >>> config = ConfigManager()
    >>> config.load()
    >>> config.get("progression.starting_hp")
    100
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self._config_dir = Path(config_dir) if config_dir else Config.CONFIG_DIR
        self._values: Dict[str, Any] = copy.deepcopy(DEFAULTS)
        self._loaded_files: List[str] = []
        self._initialized = False

    @classmethod
    def from_dict(cls, overrides: Mapping[str, Any]) -> "ConfigManager":
        """Build a manager from defaults plus in-memory overrides."""
        manager = cls()
        cls._deep_merge_dict(manager._values, copy.deepcopy(dict(overrides)))
        manager._initialized = True
        return manager

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: Mapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)
            else:
                target[key] = value

    def load(self) -> None:
        """
        Load every YAML file under the config directory over the defaults.

        A missing directory is not an error; a file that fails to parse is
        logged and skipped so one bad override cannot take the engine down.
        """
        if not self._config_dir.exists():
            logger.warning(
                "Config directory not found; using built-in defaults only",
                extra={"config_dir": str(self._config_dir)},
            )
            self._initialized = True
            return

        yaml_files = sorted(
            list(self._config_dir.rglob("*.yaml")) + list(self._config_dir.rglob("*.yml"))
        )

        for yaml_file in yaml_files:
            relative = str(yaml_file.relative_to(self._config_dir))
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except (OSError, yaml.YAMLError) as exc:
                logger.warning(
                    "Failed to load YAML config",
                    extra={
                        "file": relative,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                )
                continue

            if isinstance(data, dict):
                self._deep_merge_dict(self._values, data)
                self._loaded_files.append(relative)
                logger.debug("Loaded YAML config", extra={"file": relative})
            elif data is not None:
                logger.warning(
                    "Ignoring non-dict YAML root object",
                    extra={"file": relative, "root_type": type(data).__name__},
                )

        self._initialized = True
        logger.info(
            "YAML configs loaded",
            extra={
                "yaml_file_count": len(self._loaded_files),
                "config_dir": str(self._config_dir),
            },
        )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Examples
        --------
        >>> config.get("progression.currency_code")
        'CR'
        >>> config.get("progression.missing", 5)
        5
        """
        if not self._initialized:
            logger.warning(
                "ConfigManager accessed before load(); using defaults only"
            )
            self._initialized = True

        value: Any = self._values
        for part in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(part)
            if value is None:
                return default
        return value

    @property
    def loaded_files(self) -> List[str]:
        return list(self._loaded_files)
