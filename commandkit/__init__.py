"""
CommandKit - command, event and validation handling for discord.py

Drop command, event and validation files into folders and CommandKit loads
them, keeps Discord's application commands in sync with them, and routes
interactions and events to them.

Key Components:
- CommandKit: the object a bot creates and initializes
- CommandHandler: command loading, registration and dispatch
- ValidationPipeline: guards run before every command
- EventHandler: per-event handler chains
"""

from .commandkit import CommandKit
from .core import (
    CommandType,
    CommandData,
    CommandOptions,
    CommandInfo,
    CommandEntry,
    ValidationContext,
    ConfigurationManager,
    CommandKitConfiguration,
    FileModuleSource,
    StaticModuleSource,
    setup_logging
)
from .errors import CommandKitError, ConfigurationError, LoadError
from .services import CommandKitTree

__all__ = [
    'CommandKit',
    'CommandType',
    'CommandData',
    'CommandOptions',
    'CommandInfo',
    'CommandEntry',
    'ValidationContext',
    'ConfigurationManager',
    'CommandKitConfiguration',
    'FileModuleSource',
    'StaticModuleSource',
    'setup_logging',
    'CommandKitError',
    'ConfigurationError',
    'LoadError',
    'CommandKitTree'
]
