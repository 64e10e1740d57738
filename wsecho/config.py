"""
Конфигурация сервера.

Значения читаются из переменных окружения WSECHO_*, а также из
необязательного .env файла (переменные окружения имеют приоритет).
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_ENV_FILE = Path(".env")


def _load_env_file():
    env_path = Path(os.getenv("WSECHO_ENV_FILE", str(DEFAULT_ENV_FILE)))
    if env_path.exists():
        load_dotenv(env_path, override=False)


def _get_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Некорректное значение {name}={raw!r}") from None


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 3333
    handshake_timeout: float = 5.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        _load_env_file()
        config = cls(
            host=os.getenv("WSECHO_HOST", cls.host),
            port=_get_number("WSECHO_PORT", cls.port, int),
            handshake_timeout=_get_number("WSECHO_HANDSHAKE_TIMEOUT", cls.handshake_timeout, float),
            log_level=os.getenv("WSECHO_LOG_LEVEL", cls.log_level).upper(),
        )
        if not 0 <= config.port <= 65535:
            raise ValueError(f"Некорректное значение WSECHO_PORT={config.port}")
        if config.handshake_timeout <= 0:
            raise ValueError(f"Некорректное значение WSECHO_HANDSHAKE_TIMEOUT={config.handshake_timeout}")
        return config
