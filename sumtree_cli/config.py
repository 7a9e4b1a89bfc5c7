"""
CLI Configuration

Loads the runtime configuration for the CLI from a YAML or JSON file and
environment variables. Environment variables override file settings.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sumtree.config import RuntimeConfig
from sumtree.schemas.errors import ConfigurationException


OUTPUT_FORMATS = ("human", "json")


@dataclass
class CLIConfig:
    """Main CLI configuration."""

    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)

    # Output
    default_output_format: str = "human"  # "human" or "json"

    @property
    def log_level(self) -> str:
        return self.runtime.logging.level

    @property
    def log_file(self) -> str | None:
        return self.runtime.logging.file

    def to_dict(self) -> dict[str, Any]:
        data = self.runtime.to_dict()
        data["default_output_format"] = self.default_output_format
        return data


def load_config_from_file(path: Path) -> CLIConfig:
    """Load configuration from a YAML (.yaml/.yml) or JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    if path.suffix in (".yaml", ".yml"):
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    else:
        with open(path, "r") as f:
            data = json.load(f)

    if not isinstance(data, dict):
        raise ConfigurationException(
            f"Config file must contain a mapping: {path}",
            details={"path": str(path)},
        )

    data = dict(data)
    output_format = data.pop("default_output_format", "human")
    if output_format not in OUTPUT_FORMATS:
        raise ConfigurationException(
            f"default_output_format must be one of {OUTPUT_FORMATS}, got {output_format!r}",
        )

    return CLIConfig(
        runtime=RuntimeConfig.from_dict(data),
        default_output_format=output_format,
    )


def load_config(config_path: Path | None = None) -> CLIConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration
    """
    config = CLIConfig()

    if config_path is not None:
        config = load_config_from_file(config_path)
    else:
        default_paths = [
            Path.cwd() / "sumtree.yaml",
            Path.cwd() / "sumtree.json",
            Path.home() / ".config" / "sumtree" / "config.yaml",
        ]
        for default_path in default_paths:
            if default_path.exists():
                config = load_config_from_file(default_path)
                break

    config.runtime = config.runtime.with_env_overrides()
    return config


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """# sumtree configuration
hash:
  algorithm: sha256        # sha256, sha3_256 or blake2b_256
tree:
  amount_bits: 64          # multiple of 8
  max_workers: 1           # >1 builds large levels on a thread pool
  parallel_threshold: 1024 # minimum pairs in a level before using the pool
logging:
  level: INFO
  file: null
default_output_format: human
"""
