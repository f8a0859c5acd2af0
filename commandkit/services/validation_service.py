"""
Validation Service for CommandKit
"""

import inspect
import logging
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple, Union

from ..core.models import CommandEntry, ValidationContext
from ..core.module_loader import FileModuleSource, ModuleSource
from ..errors import LoadError
from ..utils.paths import compact_path, get_file_paths
from .validations import BUILT_IN_VALIDATIONS

logger = logging.getLogger('commandkit.services.validation_service')

ValidationRule = Callable[[ValidationContext], object]


async def _resolve(result):
    if inspect.isawaitable(result):
        return await result
    return result


class ValidationPipeline:
    """
    Ordered guards evaluated before a command handler runs.

    Custom rules come first in the order they were loaded, followed by the
    built-in rules unless those are skipped. The rule tuple is fixed at
    construction.
    """

    def __init__(
        self,
        custom_rules: Iterable[ValidationRule] = (),
        built_in_rules: Iterable[ValidationRule] = BUILT_IN_VALIDATIONS,
        skip_built_in: bool = False
    ):
        rules = tuple(custom_rules)
        if not skip_built_in:
            rules += tuple(built_in_rules)
        self._rules: Tuple[ValidationRule, ...] = rules

    @property
    def rules(self) -> Tuple[ValidationRule, ...]:
        return self._rules

    async def run(self, ctx: ValidationContext, command: CommandEntry) -> bool:
        """
        Evaluate the rules and run the command if none of them stops it.

        Args:
            ctx: Invocation being validated, as the rules see it
            command: Loaded command whose handler runs when no rule stops

        Returns:
            True if the command handler ran
        """
        for rule in self._rules:
            if await _resolve(rule(ctx)):
                logger.debug(
                    f"Validation {getattr(rule, '__name__', rule)} stopped command \"{ctx.command.name}\""
                )
                return False

        await _resolve(command.run(ctx.interaction, ctx.client, ctx.handler))
        return True


class ValidationHandler:
    """Loads user-supplied validation functions from a directory"""

    def __init__(self, validations_path: Union[str, Path], module_source: Optional[ModuleSource] = None):
        self.validations_path = Path(validations_path)
        self.module_source = module_source or FileModuleSource()
        self._validations: Tuple[ValidationRule, ...] = ()

    async def init(self) -> None:
        self._build_validations()

    def _build_validations(self) -> None:
        validations = []

        for file_path in get_file_paths(self.validations_path, nesting=True):
            try:
                validation = self.module_source.load(file_path)
            except LoadError as e:
                logger.warning(f"⏩ Ignoring: Validation {compact_path(file_path)} could not be loaded: {e.reason}")
                continue

            if not callable(validation):
                logger.warning(f"⏩ Ignoring: Validation {compact_path(file_path)} does not export a function.")
                continue

            validations.append(validation)

        self._validations = tuple(validations)
        logger.info(f"Loaded {len(self._validations)} custom validations")

    @property
    def validations(self) -> Tuple[ValidationRule, ...]:
        return self._validations
