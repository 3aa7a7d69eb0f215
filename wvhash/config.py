"""
Configuration for index construction and querying.

Settings live in a YAML file (``.wvhash.yml`` by default) and can be
overridden through ``WVHASH_*`` environment variables.
"""

import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import ConfigurationError


BUILD_STRATEGIES = ("rescan", "grouped")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class IndexConfig:
    """Configuration for hash index construction and querying."""

    # Table sizing: record_count // table_divisor unless table_size is set
    table_divisor: int = 20
    table_size: Optional[int] = None

    # Persisted index construction
    flush_interval: int = 500  # buckets between flushes
    build_strategy: str = "rescan"
    spill_partitions: int = 64  # temporary files for the grouped strategy

    # Record parsing
    strict_records: bool = True

    # Interactive querying
    lowercase_queries: bool = True

    log_level: str = "WARNING"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ConfigurationError: If any parameter is out of range
        """
        if self.table_divisor < 1:
            raise ConfigurationError(f"table_divisor must be >= 1, got {self.table_divisor}")

        if self.table_size is not None and self.table_size < 1:
            raise ConfigurationError(f"table_size must be >= 1, got {self.table_size}")

        if self.flush_interval < 1:
            raise ConfigurationError(f"flush_interval must be >= 1, got {self.flush_interval}")

        if self.build_strategy not in BUILD_STRATEGIES:
            raise ConfigurationError(
                f"build_strategy must be one of {', '.join(BUILD_STRATEGIES)}, "
                f"got {self.build_strategy!r}"
            )

        if self.spill_partitions < 1:
            raise ConfigurationError(f"spill_partitions must be >= 1, got {self.spill_partitions}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log_level: {self.log_level!r}")

    def resolve_table_size(self, record_count: int) -> int:
        """Table size for a dataset of ``record_count`` records."""
        if self.table_size is not None:
            return self.table_size
        return max(1, record_count // self.table_divisor)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IndexConfig':
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def save_to_file(self, file_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def load_from_file(cls, file_path: Union[str, Path]) -> 'IndexConfig':
        """Load configuration from YAML file."""
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(file_path, "r") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {file_path}: {e}", source=str(file_path))

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {file_path}", source=str(file_path))

        return cls.from_dict(data or {})

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        current_dir_config = Path(".wvhash.yml")
        if current_dir_config.exists():
            return current_dir_config

        return Path.home() / ".wvhash.yml"

    @classmethod
    def load_or_default(
        cls, config_path: Optional[Union[str, Path]] = None
    ) -> 'IndexConfig':
        """
        Load configuration from file or return default if not found.

        Lookup order: explicit path, ``WVHASH_CONFIG``, ``./.wvhash.yml``,
        ``~/.wvhash.yml``. Environment overrides are applied on top.

        Args:
            config_path: Optional path to configuration file

        Returns:
            IndexConfig instance
        """
        if config_path:
            return apply_environment_overrides(cls.load_from_file(config_path))

        config = None
        candidates = []
        env_config_path = os.getenv("WVHASH_CONFIG")
        if env_config_path:
            candidates.append(Path(env_config_path))
        candidates.append(cls.get_default_config_path())

        for candidate in candidates:
            if candidate.exists():
                config = cls.load_from_file(candidate)
                break

        return apply_environment_overrides(config or cls())


ENV_MAPPINGS = {
    "WVHASH_TABLE_DIVISOR": ("table_divisor", int),
    "WVHASH_TABLE_SIZE": ("table_size", int),
    "WVHASH_FLUSH_INTERVAL": ("flush_interval", int),
    "WVHASH_BUILD_STRATEGY": ("build_strategy", str),
    "WVHASH_LOG_LEVEL": ("log_level", str),
}


def get_environment_overrides() -> Dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides = {}

    for env_var, (config_key, config_type) in ENV_MAPPINGS.items():
        env_value = os.getenv(env_var)
        if env_value is not None:
            try:
                overrides[config_key] = config_type(env_value)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid environment variable {env_var}={env_value}: {e}"
                )

    return overrides


def apply_environment_overrides(config: IndexConfig) -> IndexConfig:
    """Apply environment variable overrides to configuration."""
    overrides = get_environment_overrides()

    if not overrides:
        return config

    config_dict = config.to_dict()
    config_dict.update(overrides)
    return IndexConfig.from_dict(config_dict)


def create_default_config_file(path: Union[str, Path]) -> Path:
    """Write a configuration file holding the defaults and return its path."""
    path = Path(path)
    IndexConfig().save_to_file(path)
    return path
