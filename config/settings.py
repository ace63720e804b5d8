from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global configuration for the text engine."""

    # SQLite file backing the world; ":memory:" keeps everything in process
    DB_PATH: str = "data/textengine.db"

    LOG_PATH: str = "data/textengine.log"
    LOG_LEVEL: str = "INFO"

    # Seed descriptions used when the world has to create entities itself
    START_PLACE_DESCRIPTION: str = "a quiet clearing"
    AVATAR_DESCRIPTION: str = "a traveller"

    # Console client prints every raw output map
    API_DEBUG: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }
