import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"
DEFAULT_STATIC_DIR = str(Path(__file__).parent / "static")


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    static_dir: str
    log_level: str


def load_env_file() -> bool:
    """Merge a .env file from the working directory upwards into os.environ.

    Returns False when no .env file exists; variables already set in the
    environment win over the file.
    """
    path = find_dotenv(usecwd=True)
    if not path:
        return False
    load_dotenv(path)
    return True


def static_dir_from_env() -> str:
    return os.environ.get("STATIC_DIR") or DEFAULT_STATIC_DIR


def log_level_from_env() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()


def load_settings() -> Settings:
    # TEST_ENV carries the port number in the existing deployments.
    port = os.environ.get("TEST_ENV") or str(DEFAULT_PORT)
    try:
        port_num = int(port)
    except ValueError:
        raise ValueError(f"TEST_ENV must be an integer port, got {port!r}") from None

    return Settings(
        host=os.environ.get("HOST") or DEFAULT_HOST,
        port=port_num,
        static_dir=static_dir_from_env(),
        log_level=log_level_from_env(),
    )
