"""Tests for the validation pipeline, built-in validations and validation loading."""

from unittest.mock import AsyncMock, Mock

import discord
import pytest

from commandkit.core.models import CommandData, CommandEntry, CommandInfo, CommandOptions, ValidationContext
from commandkit.services import validations
from commandkit.services.responses import send_ephemeral
from commandkit.services.validation_service import ValidationHandler, ValidationPipeline

from conftest import make_interaction, write_file


def make_entry(run=None, **flags):
    return CommandEntry(
        data=CommandData(name='ping', description='Pong'),
        options=CommandOptions(**flags),
        file_path='commands/ping.py',
        category=None,
        run=run or AsyncMock()
    )


def make_context(interaction=None, dev_guild_ids=(1,), dev_user_ids=(), dev_role_ids=(), command=None, **flags):
    command = command or make_entry(**flags)
    return ValidationContext(
        interaction=interaction or make_interaction(),
        command=command.info(),
        client=Mock(),
        handler=Mock(),
        dev_guild_ids=tuple(dev_guild_ids),
        dev_user_ids=tuple(dev_user_ids),
        dev_role_ids=tuple(dev_role_ids)
    )


def recording_rule(calls, name, stop=False):
    def rule(ctx):
        calls.append(name)
        return stop
    rule.__name__ = name
    return rule


class TestValidationPipeline:
    """Short-circuit evaluation"""

    @pytest.mark.asyncio
    async def test_stopping_rule_suppresses_the_rest(self):
        calls = []
        command = make_entry()
        ctx = make_context(command=command)
        pipeline = ValidationPipeline(
            custom_rules=[
                recording_rule(calls, 'first'),
                recording_rule(calls, 'second', stop=True),
                recording_rule(calls, 'third'),
            ],
            skip_built_in=True
        )

        ran = await pipeline.run(ctx, command)

        assert not ran
        assert calls == ['first', 'second']
        command.run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_handler_runs_once_when_nothing_stops(self):
        calls = []
        command = make_entry()
        ctx = make_context(command=command)
        pipeline = ValidationPipeline(
            custom_rules=[recording_rule(calls, name) for name in ('a', 'b', 'c')],
            skip_built_in=True
        )

        ran = await pipeline.run(ctx, command)

        assert ran
        assert calls == ['a', 'b', 'c']
        command.run.assert_awaited_once_with(ctx.interaction, ctx.client, ctx.handler)

    @pytest.mark.asyncio
    async def test_custom_rules_run_before_built_ins(self):
        calls = []
        command = make_entry()
        pipeline = ValidationPipeline(
            custom_rules=[recording_rule(calls, 'custom')],
            built_in_rules=[recording_rule(calls, 'built_in')]
        )

        await pipeline.run(make_context(command=command), command)

        assert calls == ['custom', 'built_in']

    @pytest.mark.asyncio
    async def test_async_rules_are_awaited(self):
        rule = AsyncMock(return_value=True)
        command = make_entry()
        ctx = make_context(command=command)

        assert not await ValidationPipeline([rule], skip_built_in=True).run(ctx, command)
        rule.assert_awaited_once_with(ctx)
        command.run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rules_see_the_command_without_its_handler(self):
        seen = []
        command = make_entry()
        ctx = make_context(command=command)

        def rule(ctx):
            seen.append(ctx.command)

        assert await ValidationPipeline([rule], skip_built_in=True).run(ctx, command)
        (info,) = seen
        assert type(info) is CommandInfo
        assert not hasattr(info, 'run')
        assert info.name == 'ping'

    def test_default_rule_order(self):
        pipeline = ValidationPipeline(custom_rules=[len])

        assert pipeline.rules == (
            len,
            validations.bot_permissions,
            validations.dev_only,
            validations.guild_only,
            validations.user_permissions,
        )
        assert ValidationPipeline(custom_rules=[len], skip_built_in=True).rules == (len,)

    @pytest.mark.asyncio
    async def test_sync_command_handler(self):
        run = Mock(return_value=None)
        command = make_entry(run=run)

        assert await ValidationPipeline(skip_built_in=True).run(make_context(command=command), command)
        run.assert_called_once()


class TestBotPermissions:

    @pytest.mark.asyncio
    async def test_missing_permissions_are_reported(self):
        interaction = make_interaction(bot_permissions=discord.Permissions(send_messages=True))
        ctx = make_context(interaction, bot_permissions=['send_messages', 'manage_roles', 'ban_members'])

        assert await validations.bot_permissions(ctx)
        content = interaction.response.send_message.await_args.args[0]
        assert '`manage_roles`, `ban_members`' in content
        assert 'send_messages' not in content
        assert interaction.response.send_message.await_args.kwargs == {'ephemeral': True}

    @pytest.mark.asyncio
    async def test_passes_with_permissions_or_outside_guild(self):
        assert not await validations.bot_permissions(make_context(bot_permissions=['manage_roles']))
        assert not await validations.bot_permissions(
            make_context(make_interaction(guild_id=None), bot_permissions=['manage_roles'])
        )


class TestDevOnly:

    @pytest.mark.asyncio
    async def test_non_dev_command_passes(self):
        assert not await validations.dev_only(make_context(make_interaction(guild_id=99)))

    @pytest.mark.asyncio
    async def test_rejects_outside_dev_guilds(self):
        interaction = make_interaction(guild_id=99, user_id=10)
        ctx = make_context(interaction, dev_user_ids=[10], dev_only=True)

        assert await validations.dev_only(ctx)
        assert 'development servers' in interaction.response.send_message.await_args.args[0]

    @pytest.mark.asyncio
    async def test_rejects_non_developers_in_dev_guild(self):
        interaction = make_interaction(guild_id=1, user_id=10)
        ctx = make_context(interaction, dev_user_ids=[20], dev_only=True)

        assert await validations.dev_only(ctx)
        assert 'only be used by developers' in interaction.response.send_message.await_args.args[0]

    @pytest.mark.asyncio
    async def test_dev_user_or_dev_role_passes(self):
        by_user = make_context(make_interaction(guild_id=1, user_id=20), dev_user_ids=[20], dev_only=True)
        by_role = make_context(
            make_interaction(guild_id=1, user_id=30, role_ids=[5, 7]), dev_role_ids=[7], dev_only=True
        )

        assert not await validations.dev_only(by_user)
        assert not await validations.dev_only(by_role)

    @pytest.mark.asyncio
    async def test_direct_messages_check_user_only(self):
        interaction = make_interaction(guild_id=None, user_id=20)
        interaction.user = Mock(spec=['id'])
        interaction.user.id = 20

        assert not await validations.dev_only(make_context(interaction, dev_user_ids=[20], dev_only=True))


class TestGuildOnly:

    @pytest.mark.asyncio
    async def test_rejects_direct_messages(self):
        interaction = make_interaction(guild_id=None)

        assert await validations.guild_only(make_context(interaction, guild_only=True))
        assert 'inside a server' in interaction.response.send_message.await_args.args[0]

    @pytest.mark.asyncio
    async def test_guild_invocation_passes(self):
        assert not await validations.guild_only(make_context(guild_only=True))


class TestUserPermissions:

    @pytest.mark.asyncio
    async def test_missing_permissions_are_reported(self):
        interaction = make_interaction(permissions=discord.Permissions.none())
        ctx = make_context(interaction, user_permissions='kick_members')

        assert await validations.user_permissions(ctx)
        assert '`kick_members`' in interaction.response.send_message.await_args.args[0]

    @pytest.mark.asyncio
    async def test_skipped_outside_guilds(self):
        interaction = make_interaction(guild_id=None, permissions=discord.Permissions.none())

        assert not await validations.user_permissions(make_context(interaction, user_permissions='kick_members'))


class TestSendEphemeral:

    @pytest.mark.asyncio
    async def test_uses_followup_after_response(self):
        interaction = make_interaction(done=True)

        await send_ephemeral(interaction, 'nope')

        interaction.followup.send.assert_awaited_once_with('nope', ephemeral=True)
        interaction.response.send_message.assert_not_awaited()


class TestValidationHandler:
    """Loading custom validations from files"""

    @pytest.mark.asyncio
    async def test_loads_callables_and_skips_the_rest(self, tmp_path, caplog):
        folder = tmp_path / 'validations'
        write_file(folder / 'a_cooldown.py', """
            def cooldown(ctx):
                return False

            default = cooldown
        """)
        write_file(folder / 'b_not_a_function.py', "default = 42\n")
        write_file(folder / 'c_no_default.py', "def helper(ctx):\n    return True\n")
        write_file(folder / 'nested' / 'd_blacklist.py', """
            async def default(ctx):
                return False
        """)

        handler = ValidationHandler(folder)
        await handler.init()

        assert [v.__name__ for v in handler.validations] == ['cooldown', 'default']
        assert 'b_not_a_function.py does not export a function' in caplog.text
        assert 'c_no_default.py does not export a function' in caplog.text
