"""
Path scanning helpers for CommandKit

Lists handler files and event folders in a stable, name-sorted order so that
loading, reconciliation and their log output are reproducible between runs.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger('commandkit.utils.paths')

PathLike = Union[str, Path]

HANDLER_SUFFIX = '.py'


def _is_hidden(entry: Path) -> bool:
    """Private modules, dotfiles and bytecode caches are never handlers"""
    return entry.name.startswith(('_', '.'))


def _sorted_entries(directory: Path) -> List[Path]:
    return sorted(directory.iterdir(), key=lambda entry: entry.name)


def get_file_paths(directory: Optional[PathLike], nesting: bool = False) -> List[Path]:
    """
    List handler files below a directory.

    Args:
        directory: Directory to scan (None yields an empty list)
        nesting: Whether to descend into subdirectories

    Returns:
        Paths of all ``.py`` files, directory by directory in name order
    """
    file_paths: List[Path] = []
    if not directory:
        return file_paths

    root = Path(directory)
    if not root.is_dir():
        logger.warning(f"⏩ Ignoring: {root} is not a directory.")
        return file_paths

    for entry in _sorted_entries(root):
        if _is_hidden(entry):
            continue
        if entry.is_file() and entry.suffix == HANDLER_SUFFIX:
            file_paths.append(entry)
        elif nesting and entry.is_dir():
            file_paths.extend(get_file_paths(entry, nesting=True))

    return file_paths


def get_folder_paths(directory: Optional[PathLike], nesting: bool = False) -> List[Path]:
    """
    List folders below a directory.

    Args:
        directory: Directory to scan (None yields an empty list)
        nesting: Whether to include nested folders as well

    Returns:
        Folder paths in name order, each followed by its own subfolders when nesting
    """
    folder_paths: List[Path] = []
    if not directory:
        return folder_paths

    root = Path(directory)
    if not root.is_dir():
        logger.warning(f"⏩ Ignoring: {root} is not a directory.")
        return folder_paths

    for entry in _sorted_entries(root):
        if _is_hidden(entry) or not entry.is_dir():
            continue
        folder_paths.append(entry)
        if nesting:
            folder_paths.extend(get_folder_paths(entry, nesting=True))

    return folder_paths


def compact_path(file_path: PathLike) -> str:
    """Render a path relative to the working directory when possible, for log lines"""
    path = Path(file_path)
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)
