import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DB_PATH = "data/expenses.db"


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    log_level: str = "INFO"
    currency: str = "USD"


def load_settings(env_file: str = ".env") -> Settings:
    """Read settings from the environment, after loading ``env_file`` if present.

    Variables already set in the environment win over the file.
    """
    if Path(env_file).is_file():
        load_dotenv(env_file, override=False)

    return Settings(
        db_path=os.getenv("EXPENSES_DB_PATH", DEFAULT_DB_PATH),
        log_level=os.getenv("EXPENSES_LOG_LEVEL", "INFO"),
        currency=os.getenv("EXPENSES_CURRENCY", "USD"),
    )
