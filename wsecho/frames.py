"""
Кодек фреймов WebSocket (RFC 6455, раздел 5.2).

Поддерживаются только одиночные текстовые фреймы с длиной до 16 бит.
Фрагментация, управляющие фреймы и 64-битные длины не реализованы.

Формат фрейма клиента:
    [FIN+opcode][MASK+длина][0|2 байта длины][4 байта ключа][payload]
Формат фрейма сервера:
    [FIN+opcode][длина][0|2 байта длины][payload]
"""

import asyncio
import logging
import os
import struct
from enum import IntEnum

from .constants import (
    FIN_BIT,
    MASK_BIT,
    MASK_KEY_LENGTH,
    MAX_SIXTEEN_BITS,
    OP_TEXT,
    SEVEN_BITS_MARKER,
    SIXTEEN_BITS_MARKER,
)
from .errors import (
    ConnectionClosed,
    FrameTooLarge,
    TruncatedFrame,
    UnmaskedFrame,
    UnsupportedFrameKind,
    UnsupportedLengthEncoding,
)
from .logs import log, logger


class FrameKind(IntEnum):
    TEXT = OP_TEXT


def apply_mask(data: bytes, mask_key: bytes) -> bytes:
    """Маскирование/демаскирование (RFC 6455, раздел 5.3). Операция самообратима."""
    if len(mask_key) != MASK_KEY_LENGTH:
        raise ValueError(f"Ключ маски должен быть {MASK_KEY_LENGTH} байта, получено {len(mask_key)}")
    return bytes(b ^ mask_key[i % 4] for i, b in enumerate(data))


def _header(length: int, mask_bit: int) -> bytes:
    first_byte = FIN_BIT | FrameKind.TEXT
    if length <= SEVEN_BITS_MARKER:
        return bytes([first_byte, mask_bit | length])
    if length < MAX_SIXTEEN_BITS:
        return struct.pack(">BBH", first_byte, mask_bit | SIXTEEN_BITS_MARKER, length)
    # 65536 уже не помещается в беззнаковые 16 бит
    raise FrameTooLarge(length)


def encode(message: bytes) -> bytes:
    """
    Собирает текстовый фрейм сервера.
    Фреймы сервера никогда не маскируются (RFC 6455, раздел 5.1).
    """
    return _header(len(message), 0) + message


def encode_masked(message: bytes, mask_key: bytes | None = None) -> bytes:
    """Собирает замаскированный текстовый фрейм клиента."""
    if mask_key is None:
        mask_key = os.urandom(MASK_KEY_LENGTH)
    return _header(len(message), MASK_BIT) + mask_key + apply_mask(message, mask_key)


async def _read(reader: asyncio.StreamReader, n: int) -> bytes:
    try:
        return await reader.readexactly(n)
    except asyncio.IncompleteReadError as e:
        raise TruncatedFrame(n, len(e.partial)) from e


async def _read_header(reader: asyncio.StreamReader, masked: bool) -> int:
    """
    Читает первые байты фрейма и возвращает длину payload.
    Проверяет FIN/opcode и бит MASK ожидаемой стороны.
    """
    try:
        first = await reader.readexactly(1)
    except asyncio.IncompleteReadError as e:
        raise ConnectionClosed("Соединение закрыто пиром") from e

    fin = bool(first[0] & FIN_BIT)
    opcode = first[0] & 0x0F
    if not fin or opcode != FrameKind.TEXT:
        raise UnsupportedFrameKind(opcode, fin)

    second = (await _read(reader, 1))[0]
    if masked:
        if not second & MASK_BIT:
            raise UnmaskedFrame("Фрейм клиента не замаскирован (RFC 6455, раздел 5.3)")
        indicator = second - MASK_BIT
    else:
        if second & MASK_BIT:
            raise UnmaskedFrame("Фрейм сервера не должен быть замаскирован (RFC 6455, раздел 5.1)")
        indicator = second

    if indicator <= SEVEN_BITS_MARKER:
        return indicator
    if indicator == SIXTEEN_BITS_MARKER:
        # беззнаковое big-endian 16-битное число 0 - 65535
        return struct.unpack(">H", await _read(reader, 2))[0]
    raise UnsupportedLengthEncoding(indicator)


def _trace_unmask(encoded: bytes, mask_key: bytes, decoded: bytes):
    for i, (e, d) in enumerate(zip(encoded, decoded)):
        k = mask_key[i % 4]
        log("SERVER", "·", "MASK", f"{e:08b} ^ {k:08b} = {d:08b} {chr(d)!r}", logging.DEBUG)


async def decode_header_and_unmask(reader: asyncio.StreamReader) -> bytes:
    """
    Читает один замаскированный фрейм клиента и возвращает демаскированный payload.

    UTF-8 и JSON здесь не проверяются, это забота вызывающего кода.
    Поток, оборвавшийся посреди фрейма, даёт TruncatedFrame; частичный
    payload наружу не отдаётся.
    """
    length = await _read_header(reader, masked=True)
    mask_key = await _read(reader, MASK_KEY_LENGTH)
    encoded = await _read(reader, length)
    decoded = apply_mask(encoded, mask_key)
    if logger.isEnabledFor(logging.DEBUG):
        _trace_unmask(encoded, mask_key, decoded)
    return decoded


async def read_server_frame(reader: asyncio.StreamReader) -> bytes:
    """Читает незамаскированный фрейм сервера (клиентская сторона)."""
    length = await _read_header(reader, masked=False)
    return await _read(reader, length)
