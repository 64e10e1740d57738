"""WebSocket-сервер с нуля: рукопожатие и текстовые фреймы по RFC 6455."""

from .app import wrap_message
from .errors import (
    ConnectionClosed,
    FrameTooLarge,
    HandshakeError,
    MalformedPayload,
    TruncatedFrame,
    UnmaskedFrame,
    UnsupportedFrameKind,
    UnsupportedLengthEncoding,
    WebSocketError,
)
from .frames import FrameKind, apply_mask, decode_header_and_unmask, encode, encode_masked, read_server_frame
from .handshake import accept_token, render_handshake_response

__version__ = "0.1.0"
