"""
Command Service for CommandKit

Loads command files, keeps Discord's application commands in step with them,
and routes incoming command interactions through the validation pipeline.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import discord
from discord import app_commands
from pydantic import ValidationError

from ..core.models import CommandData, CommandEntry, CommandOptions, ValidationContext
from ..core.module_loader import FileModuleSource, ModuleSource, get_export
from ..errors import LoadError
from ..utils.paths import compact_path, get_file_paths
from .registration_service import CommandRegistrar
from .validation_service import ValidationPipeline, ValidationRule
from .validations import BUILT_IN_VALIDATIONS

logger = logging.getLogger('commandkit.services.command_service')


def derive_category(file_path: Union[str, Path], commands_path: Union[str, Path]) -> Optional[str]:
    """
    Category of a command file: the folder directly below the commands root.

    ``commands/info/ping.py`` -> ``"info"``; ``commands/ping.py`` -> ``None``.
    Paths are compared as discovered, so symlinked category folders keep
    their link name. Files outside the root have no category.
    """
    try:
        relative = Path(file_path).relative_to(Path(commands_path))
    except ValueError:
        return None
    if len(relative.parts) > 1:
        return relative.parts[0]
    return None


class CommandKitTree(app_commands.CommandTree):
    """
    Command tree that stays quiet about commands it does not own.

    ``commands.Bot`` always routes interactions through its tree as well;
    commands served by CommandKit are unknown to it.
    """

    async def on_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError) -> None:
        if isinstance(error, app_commands.CommandNotFound):
            return
        await super().on_error(interaction, error)


class CommandHandler:
    """
    Owns the loaded command set.

    Usage:
        handler = CommandHandler(client, 'commands', dev_guild_ids=[123])
        await handler.init()
    """

    def __init__(
        self,
        client: Any,
        commands_path: Union[str, Path],
        handler: Any = None,
        dev_guild_ids: Iterable[int] = (),
        dev_user_ids: Iterable[int] = (),
        dev_role_ids: Iterable[int] = (),
        custom_validations: Iterable[ValidationRule] = (),
        skip_built_in_validations: bool = False,
        module_source: Optional[ModuleSource] = None
    ):
        self.client = client
        self.commands_path = Path(commands_path)
        self.handler = handler
        self.dev_guild_ids: Tuple[int, ...] = tuple(dev_guild_ids)
        self.dev_user_ids: Tuple[int, ...] = tuple(dev_user_ids)
        self.dev_role_ids: Tuple[int, ...] = tuple(dev_role_ids)
        self.custom_validations: Tuple[ValidationRule, ...] = tuple(custom_validations)
        self.skip_built_in_validations = skip_built_in_validations
        self.module_source = module_source or FileModuleSource()

        self._commands: Tuple[CommandEntry, ...] = ()
        self._commands_by_name: Dict[str, CommandEntry] = {}
        self._pipeline: Optional[ValidationPipeline] = None
        self._registered = False

    async def init(self) -> None:
        self._build_commands()
        self._build_validations()
        await self._register_commands()
        self._handle_commands()

    def _build_commands(self) -> None:
        commands = []

        for file_path in get_file_paths(self.commands_path, nesting=True):
            try:
                commands.append(self.load_command(file_path))
            except LoadError as e:
                logger.warning(f"⏩ Ignoring: Command {compact_path(file_path)} {e.reason}.")

        self._commands = tuple(commands)
        # Later files win when two commands share a name
        self._commands_by_name = {command.name: command for command in self._commands}
        logger.info(f"Loaded {len(self._commands)} commands from {self.commands_path}")

    def load_command(self, file_path: Union[str, Path]) -> CommandEntry:
        """
        Load one command file into an entry.

        Raises:
            LoadError: If the file is missing ``data`` or ``run``, or either export is malformed
        """
        path = Path(file_path)
        exported = self.module_source.load(path)

        data = get_export(exported, 'data')
        if data is None:
            raise LoadError(path, 'does not export "data"')

        run = get_export(exported, 'run')
        if run is None:
            raise LoadError(path, 'does not export "run"')
        if not callable(run):
            raise LoadError(path, 'exports a "run" that is not callable')

        options = get_export(exported, 'options') or {}

        try:
            if not isinstance(data, CommandData):
                data = CommandData.model_validate(data)
            if not isinstance(options, CommandOptions):
                options = CommandOptions.model_validate(options)
        except (ValidationError, TypeError, ValueError) as e:
            raise LoadError(path, f'has an invalid definition: {e}') from e

        return CommandEntry(
            data=data,
            options=options,
            file_path=path,
            category=derive_category(path, self.commands_path),
            run=run
        )

    def _build_validations(self) -> None:
        self._pipeline = ValidationPipeline(
            custom_rules=self.custom_validations,
            built_in_rules=BUILT_IN_VALIDATIONS,
            skip_built_in=self.skip_built_in_validations
        )

    async def _register_commands(self) -> None:
        if self.client.is_ready():
            await self.register_commands()
            return

        async def on_ready():
            await self.register_commands()

        self.client.add_listener(on_ready, 'on_ready')

    async def register_commands(self) -> Optional[Dict[str, int]]:
        """Reconcile with Discord; only the first call per handler does anything"""
        if self._registered:
            return None
        self._registered = True

        registrar = CommandRegistrar.for_client(self.client, self._commands, self.dev_guild_ids)
        return await registrar.reconcile()

    def _handle_commands(self) -> None:
        self.client.add_listener(self.handle_interaction, 'on_interaction')

    async def handle_interaction(self, interaction: discord.Interaction) -> None:
        """Run the matching command for a chat input or context menu interaction"""
        if interaction.type != discord.InteractionType.application_command:
            return

        name = (interaction.data or {}).get('name')
        target_command = self._commands_by_name.get(name)
        if target_command is None:
            return

        ctx = ValidationContext(
            interaction=interaction,
            command=target_command.info(),
            client=self.client,
            handler=self.handler,
            dev_guild_ids=self.dev_guild_ids,
            dev_user_ids=self.dev_user_ids,
            dev_role_ids=self.dev_role_ids
        )
        await self._pipeline.run(ctx, target_command)

    @property
    def commands(self) -> Tuple[CommandEntry, ...]:
        return self._commands

    @property
    def pipeline(self) -> Optional[ValidationPipeline]:
        return self._pipeline
