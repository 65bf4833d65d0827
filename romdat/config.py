"""
Configuration for the ROM catalogue converter.

Settings live in a nested dictionary merged over DEFAULT_CONFIG and can be
loaded from YAML or JSON files found next to the catalogue.
"""

import copy
import json
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

CONFIG_FILE_NAMES = [".romdat.yml", ".romdat.yaml", "romdat.yml", "romdat.yaml"]

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Config:
    """Configuration manager with dot-separated key access."""

    DEFAULT_CONFIG = {
        "parser": {
            "strict_unknown_keys": False
        },
        "string_table": {
            "capacity": 31
        },
        "references": {
            "strict": False  # Raise instead of dropping orphaned references
        },
        "output": {
            "header": True,
            "blob": True,
            "filtered_ini": False,
            "header_name": "rom_dat.h",
            "blob_name": "rom_dat.rdat",
            "filtered_ini_name": "filtered.ini"
        },
        "logging": {
            "level": "WARNING",
            "file": False,
            "json_format": True,
            "log_dir": None
        }
    }

    def __init__(self, config_dict: Optional[Dict] = None):
        """Initialize with optional config dictionary."""
        self.config = self._merge_configs(self.DEFAULT_CONFIG, config_dict or {})

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Config":
        """Load configuration from a file."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path, "r") as f:
            if path.suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f) or {}
            elif path.suffix == ".json":
                data = json.load(f)
            else:
                raise ValueError(f"Unsupported config format: {path.suffix}")

        return cls(data)

    @classmethod
    def find_and_load(cls, start_path: Path) -> "Config":
        """Find and load configuration from standard locations."""
        current = Path(start_path).resolve()
        if current.is_file():
            current = current.parent

        while True:
            for name in CONFIG_FILE_NAMES:
                config_path = current / name
                if config_path.exists():
                    return cls.from_file(config_path)
            if current == current.parent:
                break
            current = current.parent

        return cls()

    def get(self, key: str, default=None):
        """Get configuration value by dot-separated key."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def set(self, key: str, value):
        """Set configuration value by dot-separated key."""
        keys = key.split(".")
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return copy.deepcopy(self.config)

    def validate(self) -> List[str]:
        """Return a list of problems; empty when the configuration is usable."""
        errors = []

        capacity = self.get("string_table.capacity")
        if not isinstance(capacity, int) or not 1 <= capacity <= 31:
            errors.append(f"string_table.capacity must be an integer in 1..31, got {capacity!r}")

        level = str(self.get("logging.level", "")).upper()
        if level not in LOG_LEVELS:
            errors.append(f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {level!r}")

        for key in ("header_name", "blob_name", "filtered_ini_name"):
            if not self.get(f"output.{key}"):
                errors.append(f"output.{key} must not be empty")

        return errors

    def save(self, path: Union[str, Path]) -> None:
        """Write the configuration as YAML."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.config, f, default_flow_style=False, sort_keys=False)

    def _merge_configs(self, base: Dict, override: Dict) -> Dict:
        """Recursively merge configuration dictionaries."""
        result = copy.deepcopy(base)

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result
