"""
Точка входа: python -m wsecho serve | send JSON
"""

import argparse
import asyncio
import json
import sys

from .client import send_json
from .config import ServerConfig
from .errors import WebSocketError
from .logs import configure_logging, logger
from .server import run


def build_parser(config: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wsecho", description="WebSocket JSON echo server")
    parser.add_argument("--host", default=config.host)
    parser.add_argument("--port", type=int, default=config.port)
    parser.add_argument("--log-level", default=config.log_level)

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("serve", help="запустить сервер")
    send = sub.add_parser("send", help="отправить один JSON и напечатать ответ")
    send.add_argument("value", help="JSON-документ, например '{\"a\":1}'")
    return parser


def main(argv=None) -> int:
    try:
        config = ServerConfig.from_env()
    except ValueError as e:
        print(f"wsecho: {e}", file=sys.stderr)
        return 1

    args = build_parser(config).parse_args(argv)
    config.host, config.port, config.log_level = args.host, args.port, args.log_level
    configure_logging(config.log_level)

    if args.command == "serve":
        try:
            run(config)
        except KeyboardInterrupt:
            logger.info("Остановка сервера")
        except OSError as e:
            logger.error(f"Не удалось запустить сервер: {e}")
            return 1
        return 0

    try:
        value = json.loads(args.value)
        reply = asyncio.run(send_json(value, config.host, config.port))
    except (ValueError, WebSocketError, OSError) as e:
        logger.error(f"Запрос не удался: {e}")
        return 1
    print(json.dumps(reply, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
