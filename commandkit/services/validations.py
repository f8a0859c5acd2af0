"""
Built-in command validations

Each validation takes a ValidationContext, answers the user when it rejects
the invocation, and returns True to stop the command from running.
"""

from typing import Iterable, List

from ..core.models import ValidationContext
from .responses import send_ephemeral


def _missing_permissions(permissions, required: Iterable[str]) -> List[str]:
    return [name for name in required if not getattr(permissions, name, False)]


def _format_permissions(names: List[str]) -> str:
    return ', '.join(f"`{name}`" for name in names)


async def bot_permissions(ctx: ValidationContext) -> bool:
    """Stop when the bot member lacks a permission the command declares"""
    required = ctx.command.options.bot_permissions
    guild = ctx.interaction.guild
    bot_member = guild.me if guild else None
    if bot_member is None or not required:
        return False

    missing = _missing_permissions(bot_member.guild_permissions, required)
    if not missing:
        return False

    await send_ephemeral(
        ctx.interaction,
        f"❌ I do not have enough permissions to execute this command. Missing: {_format_permissions(missing)}"
    )
    return True


async def dev_only(ctx: ValidationContext) -> bool:
    """Stop dev-only commands outside dev guilds or for non-developers"""
    if not ctx.command.options.dev_only:
        return False

    interaction = ctx.interaction
    if interaction.guild_id is not None and interaction.guild_id not in ctx.dev_guild_ids:
        await send_ephemeral(interaction, "❌ This command can only be used inside development servers.")
        return True

    roles = getattr(interaction.user, 'roles', None) or []
    has_dev_role = any(role.id in ctx.dev_role_ids for role in roles)
    if interaction.user.id not in ctx.dev_user_ids and not has_dev_role:
        await send_ephemeral(interaction, "❌ This command can only be used by developers.")
        return True

    return False


async def guild_only(ctx: ValidationContext) -> bool:
    """Stop guild-only commands invoked outside a guild"""
    if ctx.command.options.guild_only and ctx.interaction.guild_id is None:
        await send_ephemeral(ctx.interaction, "❌ This command can only be used inside a server.")
        return True
    return False


async def user_permissions(ctx: ValidationContext) -> bool:
    """Stop when the invoking member lacks a permission the command declares"""
    required = ctx.command.options.user_permissions
    interaction = ctx.interaction
    if interaction.guild_id is None or not required:
        return False

    missing = _missing_permissions(interaction.permissions, required)
    if not missing:
        return False

    await send_ephemeral(
        interaction,
        f"❌ You do not have enough permissions to run this command. Missing: {_format_permissions(missing)}"
    )
    return True


# Fixed evaluation order
BUILT_IN_VALIDATIONS = (bot_permissions, dev_only, guild_only, user_permissions)
