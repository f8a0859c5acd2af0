"""
CommandKit Services Package

Command, validation and event handling for CommandKit.
"""

from .command_service import CommandHandler, CommandKitTree, derive_category
from .registration_service import (
    CommandRegistrar,
    CommandScope,
    GlobalCommandScope,
    GuildCommandScope,
    RemoteCommandSnapshot,
    are_commands_different
)
from .validation_service import ValidationHandler, ValidationPipeline
from .validations import BUILT_IN_VALIDATIONS
from .event_service import EventHandler
from .responses import send_ephemeral

__all__ = [
    'CommandHandler',
    'CommandKitTree',
    'derive_category',
    'CommandRegistrar',
    'CommandScope',
    'GlobalCommandScope',
    'GuildCommandScope',
    'RemoteCommandSnapshot',
    'are_commands_different',
    'ValidationHandler',
    'ValidationPipeline',
    'BUILT_IN_VALIDATIONS',
    'EventHandler',
    'send_ephemeral'
]
