import io
import logging

from rich.console import Console

import cli
import main
from config.settings import Settings
from core.messages import CommandInput, CommandOutput
from store.database import MEMORY_DB


def make_console() -> Console:
    return Console(file=io.StringIO(), width=120, color_system=None)


class ScriptedConsoleClient(cli.ConsoleClient):
    def __init__(self, console, *lines, api_debug=False):
        super().__init__(console, api_debug=api_debug)
        self.lines = list(lines)

    async def read(self, session):
        if not self.lines:
            return CommandInput.make("quit")
        return self.lines.pop(0)


def test_parser_flags():
    args = cli.build_parser().parse_args(["--database", "other.db", "--apidebug", "--showlog"])
    assert args.database == "other.db"
    assert args.apidebug
    assert args.showlog


def test_flags_override_settings():
    args = cli.build_parser().parse_args(["--database", MEMORY_DB, "--apidebug"])
    settings = cli.build_settings(args)
    assert settings.DB_PATH == MEMORY_DB
    assert settings.API_DEBUG


def test_write_prints_text_only():
    console = make_console()
    client = cli.ConsoleClient(console)

    client.write(None, CommandOutput.make("echo", "[bold]hi[/]"), None, None)
    client.write(None, CommandOutput.make("controllingentity", entity="abc"), None, None)

    out = console.file.getvalue()
    assert "[bold]hi[/]" in out
    assert "abc" not in out


def test_write_with_api_debug_prints_raw_map():
    console = make_console()
    client = cli.ConsoleClient(console, api_debug=True)

    client.write(None, CommandOutput.make("controllingentity", entity="abc"), None, None)

    assert "(entity: 'abc', output: 'controllingentity')" in console.file.getvalue()


async def test_end_of_input_becomes_quit(monkeypatch):
    def closed_stdin(*args, **kwargs):
        raise EOFError

    monkeypatch.setattr(cli.Prompt, "ask", closed_stdin)
    client = cli.ConsoleClient(make_console())

    result = await client.read(None)

    assert result == CommandInput.make("quit")


async def test_play_session(settings):
    console = make_console()
    client = ScriptedConsoleClient(console, "echo hello", "wait 3", "dance")

    await cli.play(settings, client)

    out = console.file.getvalue()
    for expected in ["Welcome.", "hello", "You wait for 3.", "Unknown command: dance", "Goodbye.", "Farewell."]:
        assert expected in out


def test_logging_setup_is_shared_with_the_app(tmp_path, monkeypatch):
    assert cli.setup_logging is main.setup_logging

    schema_logger = logging.getLogger("store.schema")
    monkeypatch.setattr(schema_logger, "level", schema_logger.level)
    configured = {}
    monkeypatch.setattr(main.logging, "basicConfig", lambda **kwargs: configured.update(kwargs))
    settings = Settings(DB_PATH=MEMORY_DB, LOG_PATH=str(tmp_path / "logs" / "engine.log"), _env_file=None)

    main.setup_logging(settings)
    assert [type(h) for h in configured["handlers"]] == [logging.FileHandler]
    configured["handlers"][0].close()

    main.setup_logging(settings, show_log=True)
    assert [type(h) for h in configured["handlers"]] == [logging.FileHandler, logging.StreamHandler]
    configured["handlers"][0].close()
    assert (tmp_path / "logs").is_dir()
