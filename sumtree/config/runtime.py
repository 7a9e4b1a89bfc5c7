"""
Runtime Configuration

Central configuration for tree construction, hash selection and logging.
The core modules never read configuration themselves; callers build a
scheme and pass build options explicitly from a RuntimeConfig.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from sumtree.crypto.hashing import get_digest_function
from sumtree.merkle.commitment import DEFAULT_AMOUNT_BITS, SumCommitmentScheme
from sumtree.merkle.sum_tree import DEFAULT_PARALLEL_THRESHOLD
from sumtree.schemas.errors import ConfigurationException

load_dotenv()


ENV_PREFIX = "SUMTREE_"


@dataclass
class HashConfig:
    """Digest function selection."""
    algorithm: str = "sha256"

    def __post_init__(self):
        # Fail early on unknown names
        get_digest_function(self.algorithm)


@dataclass
class TreeConfig:
    """Commitment domain and construction options."""
    amount_bits: int = DEFAULT_AMOUNT_BITS
    max_workers: int = 1
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD

    def __post_init__(self):
        if self.amount_bits <= 0 or self.amount_bits % 8 != 0:
            raise ConfigurationException(
                f"amount_bits must be a positive multiple of 8, got {self.amount_bits}",
                details={"amount_bits": self.amount_bits},
            )
        if self.max_workers < 1:
            raise ConfigurationException(
                f"max_workers must be at least 1, got {self.max_workers}",
                details={"max_workers": self.max_workers},
            )
        if self.parallel_threshold < 1:
            raise ConfigurationException(
                f"parallel_threshold must be at least 1, got {self.parallel_threshold}",
                details={"parallel_threshold": self.parallel_threshold},
            )


@dataclass
class LoggingConfig:
    """Logging level and optional log file."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (and a .env file)
    - YAML file
    - Programmatic construction
    """
    hash: HashConfig = field(default_factory=HashConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - SUMTREE_HASH_ALGORITHM: sha256, sha3_256 or blake2b_256
        - SUMTREE_AMOUNT_BITS: Amount width in bits (multiple of 8)
        - SUMTREE_MAX_WORKERS: Threads used for level construction
        - SUMTREE_PARALLEL_THRESHOLD: Minimum pairs per parallel level
        - SUMTREE_LOG_LEVEL: Log level
        - SUMTREE_LOG_FILE: Optional log file path
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM"):
            overrides.setdefault("hash", {})["algorithm"] = os.getenv(
                f"{ENV_PREFIX}HASH_ALGORITHM"
            )

        for key in ("amount_bits", "max_workers", "parallel_threshold"):
            raw = os.getenv(f"{ENV_PREFIX}{key.upper()}")
            if raw:
                overrides.setdefault("tree", {})[key] = _parse_int(key, raw)

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv(
                f"{ENV_PREFIX}LOG_LEVEL", "INFO"
            ).upper()
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Config file must contain a mapping: {path}",
                details={"path": str(path)},
            )
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        hash_data = data.get("hash", {}) or {}
        tree_data = data.get("tree", {}) or {}
        logging_data = data.get("logging", {}) or {}

        try:
            hash_config = HashConfig(**hash_data)
            tree = TreeConfig(**tree_data)
            logging_config = LoggingConfig(**logging_data)
        except TypeError as e:
            raise ConfigurationException(
                f"Unknown configuration key: {e}",
                details={"error": str(e)},
            ) from e

        return cls(
            hash=hash_config,
            tree=tree,
            logging=logging_config,
            extra=data.get("extra", {}) or {},
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        data = self.to_dict()
        for section, values in overrides.items():
            data.setdefault(section, {}).update(values)
        return self.from_dict(copy.deepcopy(data))

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "hash": {
                "algorithm": self.hash.algorithm,
            },
            "tree": {
                "amount_bits": self.tree.amount_bits,
                "max_workers": self.tree.max_workers,
                "parallel_threshold": self.tree.parallel_threshold,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "extra": dict(self.extra),
        }

    def build_scheme(self) -> SumCommitmentScheme:
        """Commitment scheme described by this configuration."""
        return SumCommitmentScheme(
            digest=get_digest_function(self.hash.algorithm),
            amount_bits=self.tree.amount_bits,
        )

    def build_options(self) -> dict[str, Any]:
        """Keyword arguments for MerkleSumTree.build()."""
        return {
            "scheme": self.build_scheme(),
            "max_workers": self.tree.max_workers,
            "parallel_threshold": self.tree.parallel_threshold,
        }


def _parse_int(key: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationException(
            f"{ENV_PREFIX}{key.upper()} must be an integer, got {raw!r}",
            details={"key": key, "value": raw},
        ) from None


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: Optional[RuntimeConfig]) -> None:
    """Set (or with None, reset) the default runtime configuration."""
    global _default_config
    _default_config = config
