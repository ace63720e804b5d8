"""Error taxonomy for the text engine."""


class TextEngineError(Exception):
    """Base class for all engine errors."""


class StorageError(TextEngineError):
    """Any I/O failure coming out of the persistence layer."""


class SchemaMigrationError(TextEngineError):
    """A subsystem initializer failed; the world must not run."""

    def __init__(self, subsystem_id: str, message: str):
        super().__init__(f"Subsystem {subsystem_id}: {message}")
        self.subsystem_id = subsystem_id


class ParseError(TextEngineError, ValueError):
    """A variant matched the text but its extraction rejected the arguments."""


class DispatchError(TextEngineError, RuntimeError):
    """A command name reached the dispatcher without a registered handler."""
