"""
Константы протокола WebSocket (RFC 6455) и ограничения этого сервера.
"""

# GUID захардкожен в RFC 6455, раздел 1.3 (Opening Handshake)
GUID = "258EAFA5-E914-47DA-95CA-C5AB0DC85B11"

# Опкоды фреймов
OP_CONTINUATION = 0x0
OP_TEXT         = 0x1
OP_BINARY       = 0x2
OP_CLOSE        = 0x8
OP_PING         = 0x9
OP_PONG         = 0xA

OPCODE_NAMES = {
    OP_CONTINUATION: "CONT",
    OP_TEXT:         "TEXT",
    OP_BINARY:       "BIN",
    OP_CLOSE:        "CLOSE",
    OP_PING:         "PING",
    OP_PONG:         "PONG",
}

FIN_BIT  = 0x80
MASK_BIT = 0x80

# Классы длины payload (RFC 6455, раздел 5.2)
SEVEN_BITS_MARKER      = 125
SIXTEEN_BITS_MARKER    = 126
SIXTY_FOUR_BITS_MARKER = 127  # не поддерживается

MASK_KEY_LENGTH = 4

# Верхняя граница 16-битного класса (исключительно)
MAX_SIXTEEN_BITS = 2 ** 16
