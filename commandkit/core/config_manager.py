"""
Configuration Management for CommandKit
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from ..errors import ConfigurationError

logger = logging.getLogger('commandkit.core.config_manager')

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class Environment(Enum):
    """Supported deployment environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class CommandKitConfiguration(BaseModel):
    """CommandKit options plus the few settings the bot bootstrap needs"""

    model_config = ConfigDict(frozen=True)

    # Handler locations
    commands_path: Optional[Path] = None
    events_path: Optional[Path] = None
    validations_path: Optional[Path] = None

    # Developer allow-list
    dev_guild_ids: Tuple[int, ...] = ()
    dev_user_ids: Tuple[int, ...] = ()
    dev_role_ids: Tuple[int, ...] = ()

    skip_built_in_validations: bool = False

    # Bootstrap
    bot_token: Optional[str] = None
    log_level: str = "INFO"
    log_file_path: Optional[Path] = None

    @field_validator('dev_guild_ids', 'dev_user_ids', 'dev_role_ids', mode='before')
    @classmethod
    def validate_ids(cls, v):
        if v is None:
            return ()
        if isinstance(v, (int, str)):
            v = str(v).split(',')
        return tuple(int(str(item).strip()) for item in v if str(item).strip())

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f'log_level must be one of {VALID_LOG_LEVELS}')
        return v.upper()

    @model_validator(mode='after')
    def validate_paths(self) -> 'CommandKitConfiguration':
        if self.validations_path and not self.commands_path:
            raise ValueError('"commands_path" is required when "validations_path" is set.')
        return self


def build_configuration(**options: Any) -> CommandKitConfiguration:
    """
    Validate raw options into a configuration object.

    Raises:
        ConfigurationError: If any option is invalid
    """
    try:
        return CommandKitConfiguration(**options)
    except ValidationError as e:
        messages = '; '.join(error['msg'] for error in e.errors())
        raise ConfigurationError(messages) from e


class ConfigurationManager:
    """
    Loads CommandKit configuration from files and the environment.

    Sources are applied in order, later ones winning:
    ``config/default.yaml``, ``config/<environment>.yaml``, ``.env``,
    then real environment variables.
    """

    # Environment variable -> configuration key
    ENV_MAPPINGS = {
        'BOT_TOKEN': 'bot_token',
        'LOG_LEVEL': 'log_level',
        'LOG_FILE_PATH': 'log_file_path',
        'COMMANDKIT_COMMANDS_PATH': 'commands_path',
        'COMMANDKIT_EVENTS_PATH': 'events_path',
        'COMMANDKIT_VALIDATIONS_PATH': 'validations_path',
        'COMMANDKIT_DEV_GUILD_IDS': 'dev_guild_ids',
        'COMMANDKIT_DEV_USER_IDS': 'dev_user_ids',
        'COMMANDKIT_DEV_ROLE_IDS': 'dev_role_ids',
        'COMMANDKIT_SKIP_BUILT_IN_VALIDATIONS': 'skip_built_in_validations',
    }

    BOOLEAN_KEYS = {'skip_built_in_validations'}

    def __init__(self, base_path: Optional[Path] = None):
        self.base_path = Path(base_path) if base_path else Path.cwd()
        self.config_dir = self.base_path / "config"
        self.environment = self._detect_environment()
        self._configuration: Optional[CommandKitConfiguration] = None

        logger.info(f"ConfigurationManager initialized for environment: {self.environment.value}")

    def load_configuration(self) -> CommandKitConfiguration:
        """
        Load and validate configuration from all sources.

        Returns:
            Validated configuration object

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_data = self._load_yaml_file(self.config_dir / "default.yaml")
        config_data.update(self._load_yaml_file(self.config_dir / f"{self.environment.value}.yaml"))

        env_file = self.base_path / '.env'
        if env_file.exists():
            config_data.update(self._map_environment(dotenv_values(env_file)))
            logger.debug(f"Loaded configuration from {env_file}")

        config_data.update(self._map_environment(os.environ))

        self._configuration = build_configuration(**config_data)
        logger.info("Configuration loaded successfully")
        return self._configuration

    def get_configuration(self) -> CommandKitConfiguration:
        """Get current configuration, loading if necessary"""
        if self._configuration is None:
            return self.load_configuration()
        return self._configuration

    def reload_configuration(self) -> CommandKitConfiguration:
        """Reload configuration from sources"""
        self._configuration = None
        return self.load_configuration()

    def _detect_environment(self) -> Environment:
        env_var = os.getenv('COMMANDKIT_ENVIRONMENT', '').lower()
        if env_var:
            try:
                return Environment(env_var)
            except ValueError:
                logger.warning(f"Unknown COMMANDKIT_ENVIRONMENT '{env_var}', using development")
        return Environment.DEVELOPMENT

    def _map_environment(self, values: Dict[str, Optional[str]]) -> Dict[str, Any]:
        """Translate environment-style keys into configuration keys"""
        mapped: Dict[str, Any] = {}
        for env_var, config_key in self.ENV_MAPPINGS.items():
            env_value = values.get(env_var)
            if env_value is None:
                continue
            if config_key in self.BOOLEAN_KEYS:
                mapped[config_key] = env_value.lower() in ('true', '1', 'yes', 'on')
            else:
                mapped[config_key] = env_value
            logger.debug(f"Applied environment variable {env_var} -> {config_key}")
        return mapped

    def _load_yaml_file(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load YAML file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping at the top level")

        logger.debug(f"Loaded configuration from {path}")
        return data
