"""
Минимальный клиент: рукопожатие, один JSON-запрос, один ответ.
"""

import asyncio
import json

from .frames import encode_masked, read_server_frame
from .handshake import generate_key, parse_request, render_upgrade_request, verify_accept
from .logs import log

SIDE = "CLIENT"


async def _perform_handshake(reader: asyncio.StreamReader, writer: asyncio.StreamWriter, host: str, port: int):
    key = generate_key()
    log(SIDE, "·", "HAND", f"Sec-WebSocket-Key={key}")
    writer.write(render_upgrade_request(host, port, key).encode())
    await writer.drain()

    response = await asyncio.wait_for(reader.readuntil(b"\r\n\r\n"), timeout=5)
    status_line, headers = parse_request(response.decode("utf-8", errors="replace"))
    log(SIDE, "<-", "HTTP", status_line)
    verify_accept(status_line, headers, key)


async def send_json(value, host: str = "127.0.0.1", port: int = 3333):
    """Отправляет value как JSON и возвращает разобранный ответ сервера."""
    reader, writer = await asyncio.open_connection(host, port)
    log(SIDE, "·", "TCP", f"Подключились к {host}:{port}")
    try:
        await _perform_handshake(reader, writer, host, port)

        payload = json.dumps(value, ensure_ascii=False).encode("utf-8")
        writer.write(encode_masked(payload))
        await writer.drain()
        log(SIDE, "->", "FRAME", f"opcode=TEXT len={len(payload)} MASKED=1")

        reply = await read_server_frame(reader)
        log(SIDE, "<-", "APP", reply.decode("utf-8", errors="replace"))
        return json.loads(reply)
    finally:
        writer.close()
        await writer.wait_closed()
