"""Configuration for the deployer.

Loaded from a YAML file; everything has a default so the file is optional.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from deployer.config_safe_loader import load_yaml

_LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/asg-deployer/config.yaml")


class HaltConfig(BaseModel):
    """How long halt waits for the execution to stop."""

    poll_interval: float = Field(default=1.0, gt=0)  # seconds between DescribeExecution calls
    max_polls: int = Field(default=900, gt=0)

    model_config = ConfigDict(frozen=True, extra="forbid")


class DeployerConfig(BaseModel):
    """Main deployer configuration."""

    # Value of the DeployWith tag on the images and subnets we are allowed to use
    deploy_with: str = "asg-deployer"
    state_machine_name: str = "asg-deployer"
    state_bucket: str | None = None
    halt: HaltConfig = HaltConfig()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def load(cls, config_path: Path) -> DeployerConfig:
        """Load configuration from config path.

        Args:
            config_path: Path to the configuration file (e.g., ~/.config/asg-deployer/config.yaml)

        Returns:
            DeployerConfig instance with loaded values, or defaults if file doesn't exist

        Raises:
            ValidationError: If config contains invalid values or unknown keys
        """
        config_path = config_path.expanduser()
        if not config_path.exists():
            _LOGGER.debug("Config file %s does not exist, using defaults", config_path)
            return cls()

        try:
            with config_path.open(encoding="utf-8") as config_file:
                config_data = load_yaml(config_file)

            if config_data is None:
                _LOGGER.warning("Config file %s is empty, using defaults", config_path)
                return cls()

            return cls.model_validate(config_data)

        except ValidationError as e:
            _LOGGER.error("Invalid config in %s: %s", config_path, e)
            raise
        except Exception as e:
            _LOGGER.error("Failed to load config from %s: %s", config_path, e)
            raise

    def with_cli_overrides(
        self,
        state_bucket: str | None = None,
        state_machine_name: str | None = None,
    ) -> DeployerConfig:
        """Create a new DeployerConfig with CLI overrides applied."""
        config_dict = self.model_dump()
        if state_bucket:
            config_dict["state_bucket"] = state_bucket
            _LOGGER.info("CLI override: state bucket = %s", state_bucket)

        if state_machine_name:
            config_dict["state_machine_name"] = state_machine_name
            _LOGGER.info("CLI override: state machine = %s", state_machine_name)

        return self.__class__.model_validate(config_dict)
