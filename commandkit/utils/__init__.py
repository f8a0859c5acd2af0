"""
Utility helpers for CommandKit
"""

from .paths import get_file_paths, get_folder_paths, compact_path

__all__ = [
    'get_file_paths',
    'get_folder_paths',
    'compact_path'
]
