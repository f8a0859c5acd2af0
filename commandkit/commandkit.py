"""
CommandKit Orchestrator
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

from .core.config_manager import CommandKitConfiguration, build_configuration
from .core.models import CommandInfo, CommandEntry
from .core.module_loader import FileModuleSource, ModuleSource
from .errors import ConfigurationError
from .services.command_service import CommandHandler
from .services.event_service import EventHandler
from .services.validation_service import ValidationHandler

logger = logging.getLogger('commandkit.commandkit')


class CommandKit:
    """
    Wires command, validation and event handling onto a discord.py bot.

    Options are validated when the instance is created; loading and
    registration happen in ``init()``, typically from the bot's
    ``setup_hook``:

        kit = CommandKit(bot, commands_path='commands', events_path='events')

        async def setup_hook():
            await kit.init()
    """

    def __init__(
        self,
        client: Any,
        *,
        commands_path: Optional[Path] = None,
        events_path: Optional[Path] = None,
        validations_path: Optional[Path] = None,
        dev_user_ids: Optional[Iterable[int]] = None,
        dev_guild_ids: Optional[Iterable[int]] = None,
        dev_role_ids: Optional[Iterable[int]] = None,
        skip_built_in_validations: bool = False,
        module_source: Optional[ModuleSource] = None
    ):
        if client is None:
            raise ConfigurationError('"client" is required when instantiating CommandKit.')

        self._client = client
        self._config = build_configuration(
            commands_path=commands_path,
            events_path=events_path,
            validations_path=validations_path,
            dev_user_ids=dev_user_ids,
            dev_guild_ids=dev_guild_ids,
            dev_role_ids=dev_role_ids,
            skip_built_in_validations=skip_built_in_validations
        )
        self._module_source = module_source or FileModuleSource()
        self._commands: Tuple[CommandEntry, ...] = ()
        self._initialized = False

        logger.info("CommandKit initialized")

    @classmethod
    def from_config(
        cls,
        client: Any,
        config: CommandKitConfiguration,
        module_source: Optional[ModuleSource] = None
    ) -> 'CommandKit':
        """Create an instance from a loaded configuration"""
        return cls(
            client,
            commands_path=config.commands_path,
            events_path=config.events_path,
            validations_path=config.validations_path,
            dev_user_ids=config.dev_user_ids,
            dev_guild_ids=config.dev_guild_ids,
            dev_role_ids=config.dev_role_ids,
            skip_built_in_validations=config.skip_built_in_validations,
            module_source=module_source
        )

    async def init(self) -> None:
        """Load events, then validations, then commands; runs at most once"""
        if self._initialized:
            logger.warning("CommandKit.init() called more than once, ignoring")
            return
        self._initialized = True

        try:
            if self._config.events_path:
                event_handler = EventHandler(
                    client=self._client,
                    events_path=self._config.events_path,
                    handler=self,
                    module_source=self._module_source
                )
                await event_handler.init()

            validation_functions = ()
            if self._config.validations_path:
                validation_handler = ValidationHandler(
                    validations_path=self._config.validations_path,
                    module_source=self._module_source
                )
                await validation_handler.init()
                validation_functions = validation_handler.validations

            if self._config.commands_path:
                command_handler = CommandHandler(
                    client=self._client,
                    commands_path=self._config.commands_path,
                    handler=self,
                    dev_guild_ids=self._config.dev_guild_ids,
                    dev_user_ids=self._config.dev_user_ids,
                    dev_role_ids=self._config.dev_role_ids,
                    custom_validations=validation_functions,
                    skip_built_in_validations=self._config.skip_built_in_validations,
                    module_source=self._module_source
                )
                await command_handler.init()
                self._commands = command_handler.commands

        except Exception as e:
            logger.error(f"Failed to initialize CommandKit: {e}")
            raise

    @property
    def commands(self) -> Tuple[CommandInfo, ...]:
        """All commands CommandKit is handling, without their handlers"""
        return tuple(command.info() for command in self._commands)

    @property
    def commands_path(self) -> Optional[Path]:
        return self._config.commands_path

    @property
    def events_path(self) -> Optional[Path]:
        return self._config.events_path

    @property
    def validations_path(self) -> Optional[Path]:
        return self._config.validations_path

    @property
    def dev_user_ids(self) -> Tuple[int, ...]:
        return self._config.dev_user_ids

    @property
    def dev_guild_ids(self) -> Tuple[int, ...]:
        return self._config.dev_guild_ids

    @property
    def dev_role_ids(self) -> Tuple[int, ...]:
        return self._config.dev_role_ids
