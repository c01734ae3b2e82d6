import argparse
import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

from clinic_booking.api.chat_server import run_server  # noqa: E402
from clinic_booking.client import run_console  # noqa: E402
from clinic_booking.config import get_settings  # noqa: E402


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Clinic booking chat")
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the chat API server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    chat = subparsers.add_parser("chat", help="Chat with a running server from the terminal")
    chat.add_argument("cpf", help="Patient CPF")

    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    if args.command == "chat":
        asyncio.run(run_console(args.cpf))
    else:
        logger.info(f"Starting {settings.app_name} for {settings.clinic_name}")
        run_server(
            host=getattr(args, "host", None),
            port=getattr(args, "port", None),
        )


if __name__ == "__main__":
    main()
