from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://gateway.isolarcloud.com.hk"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    app_key: str = ""
    secret_key: str = ""
    user_account: str = ""
    user_password: str = ""
    lang: str = "_en_US"
    timeout_sec: float = 30.0
    default_ps_key: str = ""
    default_data_point: str = "p2"
    host: str = "127.0.0.1"
    port: int = 5000
    debug: bool = False


def load_settings(env_file: str | None = None) -> Settings:
    """Read settings from the environment, after loading a .env file if present.

    Variables already exported in the environment win over the .env file.
    """

    load_dotenv(env_file)
    return Settings(
        base_url=_env("SOLAR_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        app_key=_env("SOLAR_APP_KEY"),
        secret_key=_env("SOLAR_SECRET_KEY"),
        user_account=_env("SOLAR_USER_ACCOUNT"),
        user_password=_env("SOLAR_USER_PASSWORD"),
        lang=_env("SOLAR_LANG", "_en_US"),
        timeout_sec=_env_float("SOLAR_TIMEOUT_SEC", 30.0),
        default_ps_key=_env("SOLAR_DEFAULT_PS_KEY"),
        default_data_point=_env("SOLAR_DEFAULT_DATA_POINT", "p2"),
        host=_env("HOST", "127.0.0.1"),
        port=_env_int("PORT", 5000),
        debug=_env_bool("DEBUG", False),
    )


def setup_logging(app_name: str, level: str | None = None) -> logging.Logger:
    """Configure the root logger with stdout and an optional rotating file.

    LOG_LEVEL sets the level (INFO by default). LOG_FILE enables a rotating
    file handler capped by LOG_MAX_BYTES / LOG_BACKUP_COUNT.
    """

    level_name = (level or _env("LOG_LEVEL", "INFO")).strip().upper()
    level_num = logging.getLevelName(level_name)
    if not isinstance(level_num, int):
        level_num = logging.INFO

    root = logging.getLogger()
    root.setLevel(level_num)
    # Reconfiguring (tests, reloader) must not stack handlers.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    log_file = _env("LOG_FILE").strip()
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                filename=str(path),
                maxBytes=_env_int("LOG_MAX_BYTES", 5 * 1024 * 1024),
                backupCount=_env_int("LOG_BACKUP_COUNT", 5),
                encoding="utf-8",
                delay=True,
            )
        )

    for handler in handlers:
        handler.setLevel(level_num)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.captureWarnings(True)
    return logging.getLogger(app_name)


def _env(name: str, default: str = "") -> str:
    value = os.getenv(name)
    if value is None:
        return default
    return value


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "y", "on")
