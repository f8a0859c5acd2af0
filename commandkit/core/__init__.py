"""
Core Infrastructure for CommandKit

Key Components:
- ModuleSource: maps discovered handler files to the objects they export
- Models: command, remote command, event and validation data types
- ConfigurationManager: configuration from YAML, .env and the environment
- setup_logging: console and rotating file logging for a running bot
"""

from .module_loader import ModuleSource, FileModuleSource, StaticModuleSource, unwrap_default, get_export
from .models import (
    CommandType,
    CommandData,
    CommandOptions,
    CommandInfo,
    CommandEntry,
    RemoteCommand,
    EventBinding,
    ValidationContext
)
from .config_manager import ConfigurationManager, CommandKitConfiguration, Environment, build_configuration
from .logging_setup import setup_logging

__all__ = [
    'ModuleSource',
    'FileModuleSource',
    'StaticModuleSource',
    'unwrap_default',
    'get_export',
    'CommandType',
    'CommandData',
    'CommandOptions',
    'CommandInfo',
    'CommandEntry',
    'RemoteCommand',
    'EventBinding',
    'ValidationContext',
    'ConfigurationManager',
    'CommandKitConfiguration',
    'Environment',
    'build_configuration',
    'setup_logging'
]
