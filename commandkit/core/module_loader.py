"""
Module Loading for CommandKit

Turns a discovered handler file into the object it exports. Everything that
reads command, event or validation files goes through a ModuleSource so the
discovery logic never imports code directly.
"""

import hashlib
import importlib.util
import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Optional, Union

from ..errors import LoadError

logger = logging.getLogger('commandkit.core.module_loader')

DEFAULT_EXPORT = 'default'
MODULE_NAMESPACE = '_commandkit_modules'


def unwrap_default(exported: Any) -> Any:
    """Follow a ``default`` export exactly once"""
    if isinstance(exported, dict):
        return exported.get(DEFAULT_EXPORT, exported)
    return getattr(exported, DEFAULT_EXPORT, exported)


def get_export(exported: Any, name: str, default: Any = None) -> Any:
    """Read a named export from a module, object or mapping"""
    if isinstance(exported, dict):
        return exported.get(name, default)
    return getattr(exported, name, default)


class ModuleSource(ABC):
    """Maps a discovered handler path to the value it exports"""

    @abstractmethod
    def load_module(self, file_path: Path) -> Any:
        """Return the raw module (or module-like object) for a path"""
        pass

    def load(self, file_path: Union[str, Path]) -> Any:
        """
        Load a handler file and normalize its export.

        Args:
            file_path: Path of the handler file

        Returns:
            The module itself, or its ``default`` export when it defines one

        Raises:
            LoadError: If the file could not be loaded
        """
        path = Path(file_path)
        try:
            module = self.load_module(path)
        except LoadError:
            raise
        except Exception as e:
            raise LoadError(path, f"failed to import: {e}") from e

        return unwrap_default(module)


class FileModuleSource(ModuleSource):
    """Imports handler files from disk with importlib"""

    def __init__(self):
        self._modules: Dict[Path, ModuleType] = {}

    def load_module(self, file_path: Path) -> ModuleType:
        resolved = file_path.resolve()
        if resolved in self._modules:
            return self._modules[resolved]

        module_name = self._module_name(resolved)
        spec = importlib.util.spec_from_file_location(module_name, resolved)
        if spec is None or spec.loader is None:
            raise LoadError(file_path, "not an importable Python file")

        module = importlib.util.module_from_spec(spec)
        # Registered before exec so dataclasses and pickling can find the module
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            sys.modules.pop(module_name, None)
            raise

        self._modules[resolved] = module
        logger.debug(f"Imported {resolved} as {module_name}")
        return module

    @staticmethod
    def _module_name(resolved: Path) -> str:
        digest = hashlib.sha1(str(resolved).encode('utf-8')).hexdigest()[:12]
        stem = ''.join(ch if ch.isalnum() else '_' for ch in resolved.stem)
        return f"{MODULE_NAMESPACE}.{stem}_{digest}"


class StaticModuleSource(ModuleSource):
    """
    Serves pre-registered exports instead of importing files.

    Useful for frozen applications and tests: discovery still walks the
    filesystem, but each discovered path resolves to an object registered
    ahead of time.
    """

    def __init__(self, modules: Optional[Dict[Union[str, Path], Any]] = None):
        self._modules: Dict[Path, Any] = {}
        for path, exported in (modules or {}).items():
            self.register(path, exported)

    def register(self, file_path: Union[str, Path], exported: Any) -> 'StaticModuleSource':
        self._modules[Path(file_path).resolve()] = exported
        return self

    def load_module(self, file_path: Path) -> Any:
        try:
            return self._modules[file_path.resolve()]
        except KeyError:
            raise LoadError(file_path, "no module registered for this path")
