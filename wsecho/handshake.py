"""
HTTP-рукопожатие WebSocket (RFC 6455, раздел 4).
"""

import base64
import hashlib
import secrets

from .constants import GUID
from .errors import HandshakeError

PLAIN_RESPONSE = (
    "HTTP/1.1 200 OK\r\n"
    "Content-Type: text/plain\r\n"
    "Content-Length: 11\r\n"
    "Connection: close\r\n"
    "\r\n"
    "Hello World"
)

BAD_REQUEST_RESPONSE = "HTTP/1.1 400 Bad Request\r\nConnection: close\r\n\r\n"


def accept_token(opening_key: str) -> str:
    """Вычисляет Sec-WebSocket-Accept из Sec-WebSocket-Key (RFC 6455, раздел 1.3).

    Формат ключа не проверяется: на некорректный ключ получится токен,
    который отвергнет сам клиент.
    """
    sha1 = hashlib.sha1((opening_key + GUID).encode()).digest()
    return base64.b64encode(sha1).decode()


def render_handshake_response(accept_token: str) -> str:
    return (
        "HTTP/1.1 101 Switching Protocols\r\n"
        "Upgrade: websocket\r\n"
        "Connection: Upgrade\r\n"
        f"Sec-WebSocket-Accept: {accept_token}\r\n"
        "\r\n"
    )


def parse_request(raw: str) -> tuple[str, dict[str, str]]:
    """
    Разбирает заголовки HTTP-запроса/ответа.
    Возвращает (первая строка, заголовки с именами в нижнем регистре).
    """
    lines = raw.split("\r\n")
    headers = {}
    for line in lines[1:]:
        if ":" in line:
            k, v = line.split(":", 1)
            headers[k.strip().lower()] = v.strip()
    return lines[0], headers


def is_upgrade(headers: dict[str, str]) -> bool:
    return headers.get("upgrade", "").lower() == "websocket"


def upgrade_key(request_line: str, headers: dict[str, str]) -> str:
    """
    Достаёт Sec-WebSocket-Key из upgrade-запроса.
    Метод и Sec-WebSocket-Version не проверяются.
    """
    if len(request_line.split()) < 3:
        raise HandshakeError("некорректная строка запроса")
    if not is_upgrade(headers):
        raise HandshakeError("отсутствует заголовок Upgrade: websocket")
    if not headers.get("sec-websocket-key"):
        raise HandshakeError("отсутствует заголовок Sec-WebSocket-Key")
    return headers["sec-websocket-key"]


# ===================================
# Клиентская сторона
# ===================================

def generate_key() -> str:
    """Генерирует криптографически случайный Sec-WebSocket-Key."""
    return base64.b64encode(secrets.token_bytes(16)).decode()


def render_upgrade_request(host: str, port: int, key: str, path: str = "/") -> str:
    return (
        f"GET {path} HTTP/1.1\r\n"
        f"Host: {host}:{port}\r\n"
        f"Upgrade: websocket\r\n"
        f"Connection: Upgrade\r\n"
        f"Sec-WebSocket-Key: {key}\r\n"
        f"Sec-WebSocket-Version: 13\r\n"
        f"\r\n"
    )


def verify_accept(status_line: str, headers: dict[str, str], key: str) -> None:
    """Проверяет ответ сервера на рукопожатие (RFC 6455, раздел 4.1)."""
    if "101" not in status_line.split()[1:2]:
        raise HandshakeError(f"ожидался статус 101 Switching Protocols, получено: {status_line}")
    if not is_upgrade(headers):
        raise HandshakeError("неверный заголовок Upgrade в ответе сервера")
    expected = accept_token(key)
    actual = headers.get("sec-websocket-accept", "")
    if actual != expected:
        raise HandshakeError(f"неверный Sec-WebSocket-Accept: {actual} != {expected}")
