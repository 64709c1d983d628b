import logging
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_environment() -> bool:
    """Load the nearest .env above the working directory into os.environ.

    Variables already set in the environment win over the file.
    """
    path = find_dotenv(usecwd=True)
    if not path:
        return False
    return load_dotenv(path)


load_environment()


def _check_level(level_name: str) -> None:
    if level_name not in LOG_LEVELS:
        raise ValueError(f"Log level must be one of {', '.join(LOG_LEVELS)}, got {level_name!r}")


@dataclass(frozen=True)
class Config:
    """Library configuration loaded from environment variables.

    Values come from the process environment, with the caller's ``.env``
    file loaded first so it can supply anything not already set.
    """

    LOG_LEVEL: str = os.getenv("PARAMBAG_LOG_LEVEL", "WARNING").upper()
    ENV_FILE: str = os.getenv("PARAMBAG_ENV_FILE", ".env")
    ENV_PREFIX: str = os.getenv("PARAMBAG_ENV_PREFIX", "")

    @classmethod
    def validate(cls) -> None:
        _check_level(cls.LOG_LEVEL)


def configure_logging(level: str | None = None) -> None:
    """Attach a stream handler to the root logger.

    Intended for scripts and tests; importing the library never does this.
    """
    if level is None:
        Config.validate()
        level_name = Config.LOG_LEVEL
    else:
        level_name = level.upper()
        _check_level(level_name)
    logging.basicConfig(
        level=getattr(logging, level_name),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
        ]
    )
