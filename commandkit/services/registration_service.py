"""
Registration Service for CommandKit

Reconciles the loaded commands with the application commands Discord already
knows about, globally and in every developer guild. The pass runs once per
process start, issues create/edit/delete calls one at a time, and carries on
past individual failures.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.models import CommandData, CommandEntry, RemoteCommand

logger = logging.getLogger('commandkit.services.registration_service')


class CommandScope(ABC):
    """One application command namespace: global, or a single guild"""

    label: str = ''

    @abstractmethod
    async def fetch(self) -> Tuple[RemoteCommand, ...]:
        """List the commands currently registered in this scope"""
        pass

    @abstractmethod
    async def create(self, payload: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def edit(self, remote: RemoteCommand, payload: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def delete(self, remote: RemoteCommand) -> None:
        pass


class GlobalCommandScope(CommandScope):
    """Global application commands through the discord.py HTTP client"""

    label = 'globally'

    def __init__(self, client: Any):
        self.client = client

    async def fetch(self) -> Tuple[RemoteCommand, ...]:
        payloads = await self.client.http.get_global_commands(self.client.application_id)
        return tuple(RemoteCommand.from_payload(payload) for payload in payloads)

    async def create(self, payload: Dict[str, Any]) -> None:
        await self.client.http.upsert_global_command(self.client.application_id, payload)

    async def edit(self, remote: RemoteCommand, payload: Dict[str, Any]) -> None:
        await self.client.http.edit_global_command(self.client.application_id, remote.id, payload)

    async def delete(self, remote: RemoteCommand) -> None:
        await self.client.http.delete_global_command(self.client.application_id, remote.id)


class GuildCommandScope(CommandScope):
    """Application commands of one guild through the discord.py HTTP client"""

    def __init__(self, client: Any, guild: Any):
        self.client = client
        self.guild = guild
        self.label = f'in {guild.name}'

    async def fetch(self) -> Tuple[RemoteCommand, ...]:
        payloads = await self.client.http.get_guild_commands(self.client.application_id, self.guild.id)
        return tuple(RemoteCommand.from_payload(payload) for payload in payloads)

    async def create(self, payload: Dict[str, Any]) -> None:
        await self.client.http.upsert_guild_command(self.client.application_id, self.guild.id, payload)

    async def edit(self, remote: RemoteCommand, payload: Dict[str, Any]) -> None:
        await self.client.http.edit_guild_command(
            self.client.application_id, self.guild.id, remote.id, payload
        )

    async def delete(self, remote: RemoteCommand) -> None:
        await self.client.http.delete_guild_command(self.client.application_id, self.guild.id, remote.id)


class RemoteCommandSnapshot:
    """The commands of one scope as fetched at the start of reconciliation"""

    def __init__(self, scope: CommandScope, commands: Iterable[RemoteCommand]):
        self.scope = scope
        self.commands: Tuple[RemoteCommand, ...] = tuple(commands)

    @property
    def label(self) -> str:
        return self.scope.label

    def find(self, name: str) -> Optional[RemoteCommand]:
        for command in self.commands:
            if command.name == name:
                return command
        return None


def are_commands_different(remote: RemoteCommand, local: CommandData) -> bool:
    """
    Shallow comparison used to decide whether a remote command needs an edit.

    Only the description (missing treated as empty) and the number of top-level
    options are compared; changes inside options go unnoticed.
    """
    local_description = local.description or ''
    remote_description = remote.description or ''
    return local_description != remote_description or len(local.options) != remote.option_count


class CommandRegistrar:
    """
    Converges Discord's application commands toward the local command set.

    Usage:
        registrar = CommandRegistrar.for_client(client, commands, dev_guild_ids)
        await registrar.reconcile()
    """

    def __init__(
        self,
        commands: Sequence[CommandEntry],
        global_scope: CommandScope,
        guild_scopes: Sequence[CommandScope] = ()
    ):
        self.commands: Tuple[CommandEntry, ...] = tuple(commands)
        self.global_scope = global_scope
        self.guild_scopes: Tuple[CommandScope, ...] = tuple(guild_scopes)
        self._stats = {'created': 0, 'edited': 0, 'deleted': 0, 'failed': 0}

    @classmethod
    def for_client(
        cls,
        client: Any,
        commands: Sequence[CommandEntry],
        dev_guild_ids: Iterable[int] = ()
    ) -> 'CommandRegistrar':
        """Build a registrar for a connected client, resolving developer guilds from its cache"""
        guild_scopes = []
        for guild_id in dev_guild_ids:
            guild = client.get_guild(guild_id)
            if guild is None:
                logger.warning(
                    f"⏩ Ignoring: Guild {guild_id} does not exist or client isn't in this guild."
                )
                continue
            guild_scopes.append(GuildCommandScope(client, guild))

        return cls(commands, GlobalCommandScope(client), guild_scopes)

    async def reconcile(self) -> Dict[str, int]:
        """
        Run one reconciliation pass.

        Returns:
            Counts of created, edited, deleted and failed operations
        """
        try:
            global_snapshot = RemoteCommandSnapshot(self.global_scope, await self.global_scope.fetch())
        except Exception as e:
            logger.error(f"❌ Failed to fetch global commands, skipping registration: {e}")
            return self.get_stats()

        guild_snapshots: List[RemoteCommandSnapshot] = []
        for scope in self.guild_scopes:
            try:
                guild_snapshots.append(RemoteCommandSnapshot(scope, await scope.fetch()))
            except Exception as e:
                logger.error(f"❌ Failed to fetch commands {scope.label}, skipping this guild: {e}")

        for entry in self.commands:
            await self._reconcile_command(entry, global_snapshot, guild_snapshots)

        logger.info(
            f"Command registration finished: {self._stats['created']} created, "
            f"{self._stats['edited']} edited, {self._stats['deleted']} deleted, "
            f"{self._stats['failed']} failed"
        )
        return self.get_stats()

    async def _reconcile_command(
        self,
        entry: CommandEntry,
        global_snapshot: RemoteCommandSnapshot,
        guild_snapshots: List[RemoteCommandSnapshot]
    ) -> None:
        name = entry.name

        if entry.options.deleted:
            for snapshot in [global_snapshot, *guild_snapshots]:
                await self._delete_command(name, snapshot)
            return

        payload = entry.data.to_payload()

        edited = False
        for snapshot in [global_snapshot, *guild_snapshots]:
            remote = snapshot.find(name)
            if remote is None or not are_commands_different(remote, entry.data):
                continue
            await self._apply(
                lambda: snapshot.scope.edit(remote, payload),
                'edited',
                f'✅ Edited command "{name}" {snapshot.label}.',
                f'❌ Failed to edit command "{name}" {snapshot.label}.'
            )
            edited = True

        if edited:
            return

        if entry.options.dev_only:
            if not guild_snapshots:
                logger.warning(
                    f'⏩ Ignoring: Cannot register command "{name}" as no valid "dev_guild_ids" were provided.'
                )
                return

            for snapshot in guild_snapshots:
                if snapshot.find(name):
                    continue
                await self._create_command(name, payload, snapshot)
            return

        if global_snapshot.find(name):
            return
        await self._create_command(name, payload, global_snapshot)

    async def _create_command(self, name: str, payload: Dict[str, Any], snapshot: RemoteCommandSnapshot) -> None:
        await self._apply(
            lambda: snapshot.scope.create(payload),
            'created',
            f'✅ Registered command "{name}" {snapshot.label}.',
            f'❌ Failed to register command "{name}" {snapshot.label}.'
        )

    async def _delete_command(self, name: str, snapshot: RemoteCommandSnapshot) -> None:
        remote = snapshot.find(name)
        if remote is None:
            logger.warning(
                f'⏩ Ignoring: Command "{name}" is marked as deleted and is not registered {snapshot.label}.'
            )
            return

        await self._apply(
            lambda: snapshot.scope.delete(remote),
            'deleted',
            f'🚮 Deleted command "{name}" {snapshot.label}.',
            f'❌ Failed to delete command "{name}" {snapshot.label}.'
        )

    async def _apply(
        self,
        operation: Callable[[], Awaitable[None]],
        stat: str,
        success_message: str,
        failure_message: str
    ) -> bool:
        """Await one remote call, logging instead of raising on failure"""
        try:
            await operation()
        except Exception as e:
            self._stats['failed'] += 1
            logger.error(f"{failure_message} {e}")
            return False

        self._stats[stat] += 1
        logger.info(success_message)
        return True

    def get_stats(self) -> Dict[str, int]:
        return dict(self._stats)
