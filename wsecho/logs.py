"""
Логирование в формате «[время] СТОРОНА НАПРАВЛЕНИЕ [ТЕГ] сообщение».

Направления: "->" отправка, "<-" приём, "·" состояние, "!" ошибка.
"""

import logging
import sys
import time

logger = logging.getLogger("wsecho")


class _LineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = time.strftime("%H:%M:%S", time.localtime(record.created)) + f".{int(record.msecs):03d}"
        return f"[{ts}] {record.getMessage()}"


def log(side: str, direction: str, tag: str, msg: str, level: int | None = None):
    if level is None:
        level = logging.WARNING if direction == "!" else logging.INFO
    logger.log(level, f"{side:<6} {direction} [{tag}] {msg}")


def configure_logging(level: str = "INFO") -> None:
    """Подключает вывод логов в stderr. Повторный вызов только меняет уровень."""
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not any(getattr(h, "_wsecho", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(_LineFormatter())
        handler._wsecho = True
        logger.addHandler(handler)
