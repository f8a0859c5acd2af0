"""
Event Service for CommandKit

Each folder under the events path is named after a discord.py event and holds
the handler files for it. Handlers for one event run one after another in file
order; a handler that returns a truthy value ends that firing's chain.
"""

import inspect
import logging
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from ..core.models import EventBinding
from ..core.module_loader import FileModuleSource, ModuleSource
from ..errors import LoadError
from ..utils.paths import compact_path, get_file_paths, get_folder_paths

logger = logging.getLogger('commandkit.services.event_service')


class EventHandler:
    """Loads event handler chains and subscribes them to the client"""

    def __init__(
        self,
        client: Any,
        events_path: Union[str, Path],
        handler: Any = None,
        module_source: Optional[ModuleSource] = None
    ):
        self.client = client
        self.events_path = Path(events_path)
        self.handler = handler
        self.module_source = module_source or FileModuleSource()
        self._events: Tuple[EventBinding, ...] = ()

    async def init(self) -> None:
        self._build_events()
        self._register_events()

    def _build_events(self) -> None:
        events = []

        for folder_path in get_folder_paths(self.events_path):
            handlers = []

            for file_path in get_file_paths(folder_path, nesting=True):
                try:
                    event_function = self.module_source.load(file_path)
                except LoadError as e:
                    logger.warning(f"⏩ Ignoring: Event {compact_path(file_path)} could not be loaded: {e.reason}")
                    continue

                if not callable(event_function):
                    logger.warning(f"⏩ Ignoring: Event {compact_path(file_path)} does not export a function.")
                    continue

                handlers.append(event_function)

            events.append(EventBinding(name=folder_path.name, handlers=tuple(handlers)))
            logger.debug(f"Loaded {len(handlers)} handlers for event '{folder_path.name}'")

        self._events = tuple(events)

    def _register_events(self) -> None:
        for binding in self._events:
            self.client.add_listener(self._make_listener(binding), binding.listener_name)
            logger.info(f"Subscribed {len(binding.handlers)} handlers to {binding.listener_name}")

    def _make_listener(self, binding: EventBinding):
        async def listener(*args):
            await self.dispatch(binding, *args)

        listener.__name__ = binding.listener_name
        return listener

    async def dispatch(self, binding: EventBinding, *args) -> int:
        """
        Run one firing of an event chain.

        Args:
            binding: Event chain to run
            *args: Arguments discord.py passed to the listener

        Returns:
            Number of handlers that ran
        """
        ran = 0
        for event_function in binding.handlers:
            result = event_function(*args, self.client, self.handler)
            if inspect.isawaitable(result):
                result = await result
            ran += 1
            if result:
                break
        return ran

    @property
    def events(self) -> Tuple[EventBinding, ...]:
        return self._events
