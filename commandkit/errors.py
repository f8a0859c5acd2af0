"""
Exceptions raised by CommandKit
"""


class CommandKitError(Exception):
    """Base class for all CommandKit errors"""
    pass


class ConfigurationError(CommandKitError):
    """Raised when CommandKit is constructed with invalid or missing options"""
    pass


class LoadError(CommandKitError):
    """Raised when a command, event or validation file cannot be loaded"""

    def __init__(self, file_path, reason: str):
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"{file_path}: {reason}")
