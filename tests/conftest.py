"""
Общие фикстуры тестов.
"""
import asyncio
import os

import pytest

ENV_NAMES = ("WSECHO_HOST", "WSECHO_PORT", "WSECHO_HANDSHAKE_TIMEOUT", "WSECHO_LOG_LEVEL", "WSECHO_ENV_FILE")


@pytest.fixture
def clean_env(tmp_path):
    """Убирает WSECHO_* из окружения и восстанавливает их после теста (load_dotenv пишет прямо в os.environ)."""
    saved = {name: os.environ.pop(name, None) for name in ENV_NAMES}
    os.environ["WSECHO_ENV_FILE"] = str(tmp_path / "missing.env")
    yield
    for name in ENV_NAMES:
        os.environ.pop(name, None)
        if saved[name] is not None:
            os.environ[name] = saved[name]


@pytest.fixture
def read_from():
    """Прогоняет корутину-читатель по заранее известным байтам потока."""
    def run(reader_fn, data: bytes):
        async def go():
            reader = asyncio.StreamReader()
            reader.feed_data(data)
            reader.feed_eof()
            return await reader_fn(reader)
        return asyncio.run(go())
    return run
