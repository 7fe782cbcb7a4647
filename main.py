import argparse
import asyncio
import base64
import logging
import mimetypes
import sys
from pathlib import Path

from gemini_failover.bootstrap.bootstrapper import bootstrap_dispatcher
from gemini_failover.entities.message import ImageAttachment
from gemini_failover.services.DispatchService.dispatch_errors import DispatchError


def load_image_attachment(path: Path) -> ImageAttachment:
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValueError(f"Unsupported image type for {path}")

    return ImageAttachment(
        mime_type=mime_type,
        data=base64.b64encode(path.read_bytes()).decode("ascii"),
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Send a message to Gemini, failing over across API keys."
    )
    parser.add_argument("message", nargs="?", default="", help="Text to send")
    parser.add_argument(
        "--image",
        action="append",
        default=[],
        type=Path,
        help="Image file to attach (repeatable)",
    )
    parser.add_argument(
        "--env",
        default=None,
        help="development, staging or production (defaults to APP_ENV)",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logger = logging.getLogger("main")

    try:
        dispatcher, config = bootstrap_dispatcher(env=args.env)
        images = [load_image_attachment(path) for path in args.image]
        reply = await dispatcher.dispatch(args.message, images, [], config)
    except (DispatchError, OSError, RuntimeError, ValueError) as e:
        logger.error("Dispatch failed: %s", e)
        return 1

    print(reply)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
