"""
Ошибки протокольного уровня.

Все они фатальны для соединения: после потери границ фреймов
синхронизироваться с потоком невозможно, поэтому соединение закрывается.
"""

from .constants import OPCODE_NAMES


class WebSocketError(Exception):
    """Базовая ошибка WebSocket-протокола."""


class HandshakeError(WebSocketError):
    """Запрос не является пригодным WebSocket upgrade (или ответ сервера неверен)."""


class ConnectionClosed(WebSocketError):
    """Пир закрыл поток на границе фреймов."""


class FrameTooLarge(WebSocketError):
    def __init__(self, length: int):
        super().__init__(f"Payload слишком велик для 16-битной длины: {length} байт")
        self.length = length


class UnsupportedLengthEncoding(WebSocketError):
    def __init__(self, indicator: int):
        super().__init__(f"Неподдерживаемый индикатор длины: {indicator} (64-битные длины не реализованы)")
        self.indicator = indicator


class TruncatedFrame(WebSocketError):
    def __init__(self, expected: int, received: int):
        super().__init__(f"Фрейм оборван: ожидалось {expected} байт, получено {received}")
        self.expected = expected
        self.received = received


class UnsupportedFrameKind(WebSocketError):
    """Поддерживаются только одиночные текстовые фреймы (FIN=1, opcode=TEXT)."""

    def __init__(self, opcode: int, fin: bool):
        name = OPCODE_NAMES.get(opcode, f"0x{opcode:X}")
        super().__init__(f"Неподдерживаемый фрейм: opcode={name} fin={int(fin)}")
        self.opcode = opcode
        self.fin = fin


class UnmaskedFrame(WebSocketError):
    """Фрейм клиента без бита MASK (RFC 6455, раздел 5.3)."""


class MalformedPayload(WebSocketError):
    """Payload не является JSON-текстом в UTF-8."""
