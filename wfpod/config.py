"""
Configuration management for wfpod.

Loads and validates the controller configuration file (YAML), plus the
workflow and template documents the CLI compiles.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from wfpod.errors import ConfigError
from wfpod.schemas import (
    ArtifactRepository,
    ControllerConfig,
    Template,
    WorkflowContext,
)

CONFIG_ENV_VAR = "WFPOD_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".wfpod" / "config.yaml"


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML mapping."""
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {path}: {e}")

    if not data:
        raise ConfigError(f"Configuration file is empty: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {path}, got {type(data).__name__}")
    return data


class WfpodConfig:
    """Complete wfpod configuration."""

    def __init__(self, config_path: Path):
        self.config_path = config_path
        self.raw_config = _load_yaml(config_path)

        try:
            repository = ArtifactRepository.from_dict(self.raw_config.get("artifactRepository"))
        except KeyError as e:
            raise ConfigError(f"artifactRepository is missing required field {e}")

        self.controller = ControllerConfig(
            executor_image=self.raw_config.get("executorImage", ""),
            executor_image_pull_policy=self.raw_config.get("executorImagePullPolicy"),
            artifact_repository=repository,
        )

        # Logging
        self.logging = self.raw_config.get("logging", {})

    def get_log_level(self) -> str:
        """Get logging level."""
        return self.logging.get("level", "INFO").upper()

    def get_log_format(self) -> str:
        """Get log format (structured or pretty)."""
        return self.logging.get("format", "pretty")

    def get_log_file_path(self) -> Optional[Path]:
        """Get optional log file path."""
        output = self.logging.get("output")
        return Path(output) if output else None

    def validate(self) -> None:
        """Validate entire configuration."""
        if not self.controller.executor_image:
            raise ConfigError("executorImage is required")

        if self.get_log_format() not in ("structured", "pretty"):
            raise ConfigError(f"Unknown log format: {self.get_log_format()}")

    def __repr__(self) -> str:
        return f"WfpodConfig(path={self.config_path}, executor_image={self.controller.executor_image})"


def load_config(config_path: Optional[Path] = None) -> WfpodConfig:
    """
    Load wfpod configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to $WFPOD_CONFIG,
            then ~/.wfpod/config.yaml

    Returns:
        Validated WfpodConfig instance

    Raises:
        ConfigError: If config is invalid or missing
    """
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

    config = WfpodConfig(Path(config_path))
    config.validate()
    return config


def load_template(path: Path) -> Template:
    """Load a step template from a YAML or JSON file."""
    data = _load_yaml(Path(path))
    try:
        return Template.from_dict(data)
    except KeyError as e:
        raise ConfigError(f"Template {path} is missing required field {e}")


def load_workflow(path: Path, controller: ControllerConfig) -> WorkflowContext:
    """Load a Workflow object (metadata/spec/status) from a YAML or JSON file."""
    data = _load_yaml(Path(path))
    try:
        return WorkflowContext.from_dict(data, controller)
    except KeyError as e:
        raise ConfigError(f"Workflow {path} is missing required field {e}")
