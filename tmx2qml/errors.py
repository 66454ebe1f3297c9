"""
Exceptions raised while exporting a map.

Only the command line entry point turns these into exit codes.
"""


class Tmx2QmlError(Exception):
    """Base class for export failures."""


class UsageError(Tmx2QmlError):
    """Wrong command line arguments."""


class MapParseError(Tmx2QmlError):
    """The source map is missing, unreadable or malformed."""

    def __init__(self, path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class OutputWriteError(Tmx2QmlError):
    """An output file (scene, manifest or tile image) could not be written."""

    def __init__(self, path, reason: str):
        super().__init__(f"Could not write {path}: {reason}")
        self.path = path
        self.reason = reason
