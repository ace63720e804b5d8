from core.errors import (
    DispatchError,
    ParseError,
    SchemaMigrationError,
    StorageError,
    TextEngineError,
)
from core.messages import CommandInput, CommandOutput

__all__ = [
    "CommandInput",
    "CommandOutput",
    "DispatchError",
    "ParseError",
    "SchemaMigrationError",
    "StorageError",
    "TextEngineError",
]
