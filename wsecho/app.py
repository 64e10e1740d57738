"""
Прикладной уровень: оборачивает полученный JSON в ответ с меткой времени.
"""

import json
from datetime import datetime, timezone

from .errors import MalformedPayload


def timestamp(now: datetime | None = None) -> str:
    """ISO-8601 в UTC с миллисекундами и суффиксом Z, например 2024-01-01T12:00:00.000Z."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def wrap_message(payload: bytes, now: datetime | None = None) -> bytes:
    """
    Разбирает payload как JSON и возвращает {"message": ..., "at": ...} в UTF-8.
    Некорректный UTF-8 или JSON даёт MalformedPayload.
    """
    try:
        data = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedPayload(f"Payload не является JSON: {e}") from e

    response = {"message": data, "at": timestamp(now)}
    return json.dumps(response, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
