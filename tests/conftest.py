"""Shared fixtures for CommandKit tests."""

import textwrap
from collections import defaultdict
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import discord
import pytest

from commandkit.core.models import RemoteCommand
from commandkit.services.registration_service import CommandScope


def write_file(path: Path, content: str = '') -> Path:
    """Write a dedented source file, creating parent folders"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding='utf-8')
    return path


def command_source(name: str, description: str = 'A command', options: str = '{}', extra: str = '') -> str:
    return f"""
        data = {{'name': {name!r}, 'description': {description!r}}}
        options = {options}

        async def run(interaction, client, handler):
            interaction.ran.append({name!r})
        {extra}
    """


class FakeClient:
    """Stand-in for a discord.py bot: listeners, guild cache and an HTTP mock"""

    def __init__(self, ready: bool = True, guilds=()):
        self.listeners = defaultdict(list)
        self._ready = ready
        self._guilds = {guild.id: guild for guild in guilds}
        self.application_id = 4242
        self.http = Mock()
        self.http.get_global_commands = AsyncMock(return_value=[])
        self.http.get_guild_commands = AsyncMock(return_value=[])
        self.http.upsert_global_command = AsyncMock()
        self.http.upsert_guild_command = AsyncMock()
        self.http.edit_global_command = AsyncMock()
        self.http.edit_guild_command = AsyncMock()
        self.http.delete_global_command = AsyncMock()
        self.http.delete_guild_command = AsyncMock()

    def add_listener(self, func, name):
        self.listeners[name].append(func)

    def is_ready(self):
        return self._ready

    def get_guild(self, guild_id):
        return self._guilds.get(guild_id)

    async def dispatch(self, name, *args):
        for listener in self.listeners[name]:
            await listener(*args)


class FakeScope(CommandScope):
    """In-memory command scope that applies and records every call"""

    def __init__(self, label='globally', remote=(), fail_on=()):
        self.label = label
        self.remote = list(remote)
        self.fail_on = set(fail_on)
        self.calls = []
        self._next_id = 1000

    async def fetch(self):
        return tuple(self.remote)

    async def create(self, payload):
        self._record('create', payload['name'])
        self._next_id += 1
        self.remote.append(RemoteCommand(
            id=self._next_id,
            name=payload['name'],
            description=payload.get('description', ''),
            option_count=len(payload.get('options', []))
        ))

    async def edit(self, remote, payload):
        self._record('edit', remote.name)
        self.remote = [command for command in self.remote if command.id != remote.id]
        self.remote.append(RemoteCommand(
            id=remote.id,
            name=remote.name,
            description=payload.get('description', ''),
            option_count=len(payload.get('options', []))
        ))

    async def delete(self, remote):
        self._record('delete', remote.name)
        self.remote = [command for command in self.remote if command.id != remote.id]

    def _record(self, operation, name):
        self.calls.append((operation, name))
        if (operation, name) in self.fail_on:
            raise RuntimeError(f"{operation} {name} rejected")


def make_guild(guild_id: int, name: str = None):
    guild = Mock()
    guild.id = guild_id
    guild.name = name or f"Guild {guild_id}"
    return guild


def make_interaction(
    name: str = 'ping',
    guild_id=1,
    user_id: int = 10,
    role_ids=(),
    permissions: discord.Permissions = None,
    bot_permissions: discord.Permissions = None,
    done: bool = False
):
    """Mock application command interaction"""
    interaction = Mock()
    interaction.type = discord.InteractionType.application_command
    interaction.data = {'name': name}
    interaction.guild_id = guild_id
    if guild_id is None:
        interaction.guild = None
    else:
        interaction.guild = Mock()
        interaction.guild.id = guild_id
        interaction.guild.me.guild_permissions = discord.Permissions.all() if bot_permissions is None else bot_permissions

    interaction.user = Mock()
    interaction.user.id = user_id
    interaction.user.roles = [Mock(id=role_id) for role_id in role_ids]
    interaction.permissions = discord.Permissions.all() if permissions is None else permissions

    interaction.response.is_done = Mock(return_value=done)
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    interaction.ran = []
    return interaction


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def commands_dir(tmp_path):
    path = tmp_path / 'commands'
    path.mkdir()
    return path
