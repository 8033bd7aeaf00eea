from __future__ import annotations


class DataSchemaLoadError(RuntimeError):
    """Raised when a data schema definition file cannot be parsed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid data schema definition {path}: {reason}")
        self.path = str(path)
        self.reason = str(reason)


class SourceReadError(RuntimeError):
    """Raised when a source cannot be opened or parsed for previewing."""

    def __init__(self, source_name: str, reason: str) -> None:
        super().__init__(f"Source {source_name} could not be read: {reason}")
        self.source_name = str(source_name or "")
        self.reason = str(reason)


class ResourceConfigError(RuntimeError):
    """Raised when a stored resource configuration is malformed."""


class ResourcePersistenceError(OSError):
    """Raised when the resource configuration cannot be written to disk."""

    def __init__(self, shortname: str, reason: str) -> None:
        super().__init__(f"Failed to save resource {shortname}: {reason}")
        self.shortname = str(shortname)
        self.reason = str(reason)
