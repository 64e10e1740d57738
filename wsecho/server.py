"""
Asyncio-сервер: рукопожатие и цикл «прочитать фрейм -> обернуть -> ответить».
"""

import asyncio
import functools

from .app import wrap_message
from .config import ServerConfig
from .errors import ConnectionClosed, HandshakeError, WebSocketError
from .frames import decode_header_and_unmask, encode
from .handshake import (
    BAD_REQUEST_RESPONSE,
    PLAIN_RESPONSE,
    accept_token,
    is_upgrade,
    parse_request,
    render_handshake_response,
    upgrade_key,
)
from .logs import log

SIDE = "SERVER"


async def read_http_headers(reader: asyncio.StreamReader, timeout: float) -> str:
    """
    Читает HTTP-запрос до разделителя \\r\\n\\r\\n.
    Байты после разделителя остаются в буфере StreamReader и читаются как фреймы.
    """
    data = await asyncio.wait_for(reader.readuntil(b"\r\n\r\n"), timeout=timeout)
    return data.decode("utf-8", errors="replace")


async def _respond(writer: asyncio.StreamWriter, response: str):
    writer.write(response.encode())
    await writer.drain()


async def _perform_handshake(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    config: ServerConfig,
) -> bool:
    """
    Серверная часть рукопожатия (RFC 6455, раздел 4.2).
    Возвращает True если соединение переведено в WebSocket.
    """
    try:
        request = await read_http_headers(reader, config.handshake_timeout)
    except (asyncio.TimeoutError, asyncio.IncompleteReadError, asyncio.LimitOverrunError) as e:
        log(SIDE, "!", "HTTP", f"Не удалось прочитать запрос: {e!r}")
        return False

    request_line, headers = parse_request(request)
    log(SIDE, "<-", "HTTP", request_line)

    if not is_upgrade(headers):
        log(SIDE, "->", "HTTP", "200 OK")
        await _respond(writer, PLAIN_RESPONSE)
        return False

    try:
        key = upgrade_key(request_line, headers)
    except HandshakeError as e:
        log(SIDE, "->", "HTTP", f"400 Bad Request: {e}")
        await _respond(writer, BAD_REQUEST_RESPONSE)
        return False

    accept = accept_token(key)
    log(SIDE, "·", "HAND", f"{key} connected!")
    log(SIDE, "·", "HAND", f"Sec-WebSocket-Accept={accept}")

    writer.write(render_handshake_response(accept).encode())
    await writer.drain()
    log(SIDE, "->", "HTTP", "101 Switching Protocols")
    return True


async def _run_message_loop(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
    """Один фрейм в обработке: ответ уходит только после полного чтения запроса."""
    while True:
        payload = await decode_header_and_unmask(reader)
        received = payload.decode("utf-8", errors="replace")
        log(SIDE, "<-", "FRAME", f"opcode=TEXT len={len(payload)}")
        log(SIDE, "<-", "APP", received)

        frame = encode(wrap_message(payload))
        writer.write(frame)
        await writer.drain()
        log(SIDE, "->", "FRAME", f"opcode=TEXT len={len(frame)}")


async def handle_connection(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    config: ServerConfig,
):
    """Обрабатывает одно подключение. Ошибки не выходят за пределы соединения."""
    addr = writer.get_extra_info("peername")
    log(SIDE, "·", "TCP", f"Новое подключение от {addr}")

    try:
        if await _perform_handshake(reader, writer, config):
            await _run_message_loop(reader, writer)
    except ConnectionClosed:
        log(SIDE, "·", "STATE", "Клиент закрыл соединение")
    except WebSocketError as e:
        log(SIDE, "!", "PROTO", f"{type(e).__name__}: {e}")
    except ConnectionError as e:
        log(SIDE, "!", "TCP", f"Соединение оборвалось: {e!r}")
    except Exception as e:
        log(SIDE, "!", "ERROR", f"Something bad happened: {e!r}")
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except ConnectionError:
            pass
        log(SIDE, "·", "TCP", f"TCP-соединение с {addr} закрыто")


def _on_loop_error(loop: asyncio.AbstractEventLoop, context: dict):
    exc = context.get("exception")
    log(SIDE, "!", "ERROR", f"Something bad happened: {context.get('message')} {exc!r}")


async def start_server(config: ServerConfig) -> asyncio.AbstractServer:
    asyncio.get_running_loop().set_exception_handler(_on_loop_error)
    handler = functools.partial(handle_connection, config=config)
    server = await asyncio.start_server(handler, config.host, config.port)
    for sock in server.sockets:
        log(SIDE, "·", "TCP", f"Слушаем {sock.getsockname()}")
    return server


async def serve(config: ServerConfig):
    server = await start_server(config)
    async with server:
        await server.serve_forever()


def run(config: ServerConfig):
    asyncio.run(serve(config))
