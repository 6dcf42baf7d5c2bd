"""Configuration Management with Pydantic.

This module implements configuration models using Pydantic for parsing and
validation of YAML/JSON configuration files with environment variable overrides.
"""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from depcycle.graph.topological import TieBreak
from depcycle.log_config import configure_logging, get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_NAMES = ("depcycle.yaml", "depcycle.yml", "depcycle.json")


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    Attributes:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render events as JSON (True) or for the console (False)
    """

    level: str = Field(
        default="INFO",
        description="Logging level",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    json_logs: bool = Field(
        default=True,
        description="Render log events as JSON",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Accept lower-case level names.

        Args:
            v: The level value to normalize

        Returns:
            The upper-cased level name
        """
        if isinstance(v, str):
            return v.strip().upper()
        return v


class OrderingConfig(BaseModel):
    """Topological ordering settings.

    Attributes:
        tie_break: Rule for choosing among vertices that are ready at the same time
    """

    tie_break: TieBreak = Field(
        default=TieBreak.INSERTION,
        description="Tie-break rule for simultaneously ready vertices",
    )


class AnalysisConfig(BaseModel):
    """Main configuration combining all settings.

    Attributes:
        logging: Logging configuration
        ordering: Topological ordering configuration
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    ordering: OrderingConfig = Field(default_factory=OrderingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AnalysisConfig":
        """Load configuration from a YAML (or JSON) file.

        Args:
            path: Path to the configuration file

        Returns:
            Parsed and validated AnalysisConfig instance

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If the file is empty or not valid YAML
            pydantic.ValidationError: If a setting is invalid
        """
        config_path = Path(path)

        if not config_path.exists():
            msg = f"Configuration file not found: {config_path}"
            raise FileNotFoundError(msg)

        logger.info("loading_configuration", path=str(config_path))

        try:
            with config_path.open() as f:
                config_data = yaml.safe_load(f)

            if not config_data:
                msg = "Configuration file is empty"
                raise ValueError(msg)

            config_data = cls._apply_env_overrides(config_data)

            config = cls(**config_data)
        except yaml.YAMLError as e:
            logger.exception("yaml_parse_error", error=str(e), path=str(config_path))
            msg = f"Invalid YAML in configuration file: {e}"
            raise ValueError(msg) from e
        else:
            logger.info(
                "configuration_loaded",
                logging_level=config.logging.level,
                tie_break=config.ordering.tie_break.value,
            )

            return config

    @classmethod
    def _apply_env_overrides(cls, config_data: dict) -> dict:
        """Apply environment variable overrides to configuration.

        Environment variables follow the pattern: DEPCYCLE_<SETTING>
        Example: DEPCYCLE_LOGGING_LEVEL, DEPCYCLE_TIE_BREAK

        Args:
            config_data: Base configuration dictionary from file

        Returns:
            Configuration dictionary with environment overrides applied
        """
        env_overrides = {
            ("logging", "level"): "DEPCYCLE_LOGGING_LEVEL",
            ("logging", "json_logs"): "DEPCYCLE_JSON_LOGS",
            ("ordering", "tie_break"): "DEPCYCLE_TIE_BREAK",
        }

        for path, env_var in env_overrides.items():
            value = os.environ.get(env_var)
            if value is not None:
                current = config_data
                for key in path[:-1]:
                    if key not in current:
                        current[key] = {}
                    current = current[key]

                if env_var.endswith("_LOGS"):
                    value = value.lower() in ("true", "1", "yes")
                elif env_var.endswith("_TIE_BREAK"):
                    value = value.strip().lower()

                current[path[-1]] = value
                logger.debug(
                    "env_override_applied",
                    env_var=env_var,
                    config_path=".".join(path),
                )

        return config_data

    def validate_config(self) -> list[str]:
        """Validate configuration and return list of warnings.

        Returns:
            List of validation warning messages (empty if no warnings)
        """
        warnings = []

        if self.logging.level == "DEBUG":
            warnings.append(
                "DEBUG logging emits one event per vertex, edge and emitted vertex - "
                "expect large output on big graphs",
            )

        if self.ordering.tie_break is TieBreak.KEY:
            warnings.append(
                "Tie-break 'key' orders ready vertices by str(label) unless a key "
                "function is passed to the sequencer",
            )

        return warnings

    def apply_logging(self) -> None:
        """Configure structlog from the logging section."""
        configure_logging(level=self.logging.level, json_logs=self.logging.json_logs)


class ConfigManager:
    """Configuration manager using singleton pattern.

    Not thread-safe. Load the configuration once at startup, before handing
    graphs to worker threads.
    """

    _instance: AnalysisConfig | None = None

    @classmethod
    def load_config(cls, config_path: str | Path | None = None) -> AnalysisConfig:
        """Load configuration from file.

        Args:
            config_path: Path to configuration file. If None, looks for depcycle.yaml,
                        depcycle.yml or depcycle.json in the current directory.

        Returns:
            Loaded AnalysisConfig instance

        Raises:
            FileNotFoundError: If config file not found
            ValueError: If config file is invalid
        """
        if config_path is None:
            for default_name in DEFAULT_CONFIG_NAMES:
                default_path = Path(default_name)
                if default_path.exists():
                    config_path = default_path
                    break
            else:
                msg = (
                    "No configuration file found. Expected depcycle.yaml, "
                    "depcycle.yml, or depcycle.json"
                )
                raise FileNotFoundError(msg)

        return AnalysisConfig.from_yaml(config_path)

    @classmethod
    def get_config(
        cls,
        config_path: str | Path | None = None,
        reload: bool = False,
    ) -> AnalysisConfig:
        """Get configuration instance (singleton pattern).

        Args:
            config_path: Path to configuration file. Only used on first call or when reload=True.
            reload: If True, force reload configuration from file.

        Returns:
            AnalysisConfig instance
        """
        if cls._instance is None or reload:
            cls._instance = cls.load_config(config_path)

        return cls._instance

    @classmethod
    def reset_config(cls) -> None:
        """Reset the configuration instance."""
        cls._instance = None


def load_config(config_path: str | Path | None = None) -> AnalysisConfig:
    """Load configuration from file."""
    return ConfigManager.load_config(config_path)


def get_config(config_path: str | Path | None = None, reload: bool = False) -> AnalysisConfig:
    """Get configuration instance (singleton pattern)."""
    return ConfigManager.get_config(config_path, reload)


def reset_config() -> None:
    """Reset the configuration instance."""
    ConfigManager.reset_config()


__all__ = [
    "AnalysisConfig",
    "ConfigManager",
    "LoggingConfig",
    "OrderingConfig",
    "get_config",
    "load_config",
    "reset_config",
]
