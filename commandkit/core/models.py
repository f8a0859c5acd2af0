"""
Data Models for CommandKit
"""

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import discord
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


LISTENER_PREFIX = 'on_'


class CommandType(IntEnum):
    """Discord application command types"""
    CHAT_INPUT = 1
    USER = 2
    MESSAGE = 3


class CommandData(BaseModel):
    """
    Local definition of an application command.

    Unknown keys are kept and sent to Discord untouched, so fields such as
    ``nsfw`` or ``default_member_permissions`` pass straight through.
    """

    model_config = ConfigDict(frozen=True, extra='allow')

    name: str = Field(min_length=1, max_length=32)
    type: CommandType = CommandType.CHAT_INPUT
    description: Optional[str] = None
    options: Tuple[Dict[str, Any], ...] = ()
    name_localizations: Optional[Dict[str, str]] = None
    description_localizations: Optional[Dict[str, str]] = None

    @field_validator('options', mode='before')
    @classmethod
    def validate_options(cls, v):
        if v is None:
            return ()
        return v

    @model_validator(mode='after')
    def validate_command_kind(self) -> 'CommandData':
        if self.type == CommandType.CHAT_INPUT:
            if not self.description:
                raise ValueError(f'chat input command "{self.name}" requires a description')
        else:
            if self.description:
                raise ValueError(f'context menu command "{self.name}" cannot have a description')
            if self.options:
                raise ValueError(f'context menu command "{self.name}" cannot have options')
        return self

    @property
    def is_context_menu(self) -> bool:
        return self.type != CommandType.CHAT_INPUT

    def to_payload(self) -> Dict[str, Any]:
        """Render the JSON payload Discord expects for create/edit"""
        return self.model_dump(mode='json', exclude_none=True)


class CommandOptions(BaseModel):
    """Access-control and lifecycle flags declared next to a command"""

    model_config = ConfigDict(frozen=True, extra='forbid')

    deleted: bool = False
    dev_only: bool = False
    guild_only: bool = False
    user_permissions: Tuple[str, ...] = ()
    bot_permissions: Tuple[str, ...] = ()

    @field_validator('user_permissions', 'bot_permissions', mode='before')
    @classmethod
    def validate_permissions(cls, v):
        if v is None:
            return ()
        if isinstance(v, discord.Permissions):
            v = [name for name, enabled in v if enabled]
        elif isinstance(v, str):
            v = [v]
        elif isinstance(v, (list, tuple, set, frozenset)):
            v = list(v)
        else:
            raise ValueError(
                f"permissions must be a name, a list of names or discord.Permissions, got {type(v).__name__}"
            )

        not_names = [name for name in v if not isinstance(name, str)]
        if not_names:
            raise ValueError(f"permission names must be strings, got {not_names!r}")

        unknown = [name for name in v if name not in discord.Permissions.VALID_FLAGS]
        if unknown:
            raise ValueError(f"unknown permissions: {', '.join(unknown)}")
        return tuple(v)


@dataclass(frozen=True)
class CommandInfo:
    """A loaded command without its handler"""
    data: CommandData
    options: CommandOptions
    file_path: Path
    category: Optional[str]

    @property
    def name(self) -> str:
        return self.data.name


@dataclass(frozen=True)
class CommandEntry(CommandInfo):
    """A loaded command together with the coroutine that runs it"""
    run: Callable = field(repr=False, compare=False)

    def info(self) -> CommandInfo:
        """Copy of this entry with the handler stripped"""
        return CommandInfo(
            data=self.data,
            options=self.options,
            file_path=self.file_path,
            category=self.category
        )


@dataclass(frozen=True)
class RemoteCommand:
    """An application command as currently registered on Discord"""
    id: int
    name: str
    description: str = ''
    option_count: int = 0

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'RemoteCommand':
        return cls(
            id=int(payload['id']),
            name=payload['name'],
            description=payload.get('description') or '',
            option_count=len(payload.get('options') or [])
        )


@dataclass(frozen=True)
class EventBinding:
    """An event name and the ordered handlers that run for it"""
    name: str
    handlers: Tuple[Callable, ...] = ()

    @property
    def listener_name(self) -> str:
        """discord.py listener name, e.g. ``ready`` -> ``on_ready``"""
        if self.name.startswith(LISTENER_PREFIX):
            return self.name
        return f"{LISTENER_PREFIX}{self.name}"


@dataclass(frozen=True)
class ValidationContext:
    """Everything a validation rule may inspect for one command invocation (the command has no handler)"""
    interaction: Any
    command: CommandInfo
    client: Any
    handler: Any
    dev_guild_ids: Tuple[int, ...] = ()
    dev_user_ids: Tuple[int, ...] = ()
    dev_role_ids: Tuple[int, ...] = ()
