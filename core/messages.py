"""Wire messages exchanged between sessions and the engine.

Both directions are flat ``str -> str`` mappings. The classes below only add
typed accessors for the reserved keys so handlers don't scatter string
lookups around.
"""

from __future__ import annotations

# Reserved keys
M_COMMAND = "command"
M_TEXT = "text"
M_OUTPUT = "output"
M_ERROR = "error"
M_ENTITY = "entity"
M_ENTITIES = "entities"
M_TIME = "time"
M_NOW = "now"
M_TARGET = "target"
M_FROM = "from"
M_TO = "to"

# Synthetic command names produced by the interpreter
UNKNOWN_COMMAND = "unknowncommand"
ERROR_COMMAND = "errorcommand"

# Output tags
O_WELCOME = "welcome"
O_CONTROLLING_ENTITY = "controllingentity"
O_CLIENT_QUIT = "clientquit"
O_WORLD_SHUTDOWN = "worldshutdown"
O_NO_ENTITY = "noentity"


class _Message(dict[str, str]):
    """Flat string map with a stable pretty form for debugging."""

    def get_int(self, key: str, default: int | None = None) -> int | None:
        value = self.get(key)
        if value is None or value == "":
            return default
        return int(value)

    @property
    def text(self) -> str | None:
        return self.get(M_TEXT)

    @property
    def error(self) -> str | None:
        return self.get(M_ERROR)

    def to_pretty_string(self) -> str:
        return "(" + ", ".join(f"{k}: '{self[k]}'" for k in sorted(self)) + ")"


class CommandInput(_Message):
    """A structured command produced by the interpreter."""

    @classmethod
    def make(cls, command: str, **values: str) -> CommandInput:
        return cls({M_COMMAND: command, **values})

    @property
    def command(self) -> str:
        return self[M_COMMAND]


class CommandOutput(_Message):
    """A structured result delivered to a session.

    ``text`` is the human readable line; when absent nothing is shown to the
    user. ``output`` is the symbolic event tag.
    """

    @classmethod
    def make(cls, output: str, text: str | None = None, **values: str) -> CommandOutput:
        message = cls({M_OUTPUT: output, **values})
        if text is not None:
            message[M_TEXT] = text
        return message

    @property
    def output(self) -> str | None:
        return self.get(M_OUTPUT)
