"""Main entry point: launches the Terminal UI.

1. Load config
2. Configure logging
3. Start the Textual app (it starts the world and runs its loop)
"""

import logging
import sys
from pathlib import Path

from config.settings import Settings
from ui.terminal_app import TextEngineApp


def setup_logging(settings: Settings, show_log: bool = False) -> None:
    """Configure file logging, mirrored to stderr when ``show_log`` is set."""
    log_path = Path(settings.LOG_PATH)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handlers: list[logging.Handler] = [logging.FileHandler(log_path, encoding="utf-8")]
    if show_log:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        handlers=handlers,
    )
    # Schema migrations are worth keeping in full
    logging.getLogger("store.schema").setLevel(logging.DEBUG)


def main() -> None:
    """Launch the Text Engine TUI."""
    settings = Settings()
    setup_logging(settings)

    app = TextEngineApp(settings=settings)
    app.run()


if __name__ == "__main__":
    main()
