#!/usr/bin/env python3
"""
mailnorm command line
Decodes a base64url message or a batch reply and prints the records as JSON
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .modules.batch import BatchParser
from .modules.email_assembler import EmailAssembler
from .modules.errors import ParserError
from .utils.colors import Colors
from .utils.config import Config, SystemConfig
from .utils.logging_formatter import ColoredFormatter
from .utils.serialization import to_jsonable
from .utils.structured_logging import JSONFormatter


logger = logging.getLogger("mailnorm")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(system: SystemConfig) -> None:
    """
    Configure root logging from system settings

    Logs go to stderr so that stdout carries only the JSON result.
    """
    level_name = str(system.log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    console = logging.StreamHandler(sys.stderr)
    if system.log_format == "json":
        console.setFormatter(JSONFormatter())
    elif sys.stderr.isatty():
        console.setFormatter(ColoredFormatter(LOG_FORMAT))
    else:
        console.setFormatter(logging.Formatter(LOG_FORMAT))
    handlers: List[logging.Handler] = [console]

    if system.log_file:
        log_path = Path(system.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(system.log_file)
        file_handler.setFormatter(
            JSONFormatter() if system.log_format == "json" else logging.Formatter(LOG_FORMAT)
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    if not isinstance(logging.getLevelName(level_name), int):
        logger.warning("Invalid log level '%s'; defaulting to INFO", system.log_level)


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mailnorm",
        description="Normalize raw email messages and mail API batch replies into JSON.",
    )
    parser.add_argument("--env-file", default=".env", help="Environment file with settings (default: .env)")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    parser.add_argument("--log-format", choices=("text", "json"), help="Override LOG_FORMAT")
    parser.add_argument("--workers", type=int, help="Override MAILNORM_MAX_WORKERS")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation (default: 2)")

    commands = parser.add_subparsers(dest="command", required=True)
    email_cmd = commands.add_parser("email", help="Decode one base64url-encoded message")
    email_cmd.add_argument("source", help="File holding the encoded message, or - for stdin")
    batch_cmd = commands.add_parser("batch", help="Parse a multipart batch reply")
    batch_cmd.add_argument("source", help="File holding the batch reply, or - for stdin")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_arg_parser().parse_args(argv)

    config = Config(args.env_file)
    if args.log_level:
        config.system.log_level = args.log_level
    if args.log_format:
        config.system.log_format = args.log_format
    if args.workers is not None:
        config.parser.max_workers = args.workers

    try:
        config.validate()
    except ValueError as e:
        print(Colors.error(f"Configuration error: {e}"), file=sys.stderr)
        return 1

    setup_logging(config.system)

    try:
        content = _read_input(args.source)
    except OSError as e:
        print(Colors.error(f"Could not read {args.source}: {e}"), file=sys.stderr)
        return 1

    if args.command == "email":
        try:
            result = EmailAssembler(config.parser).parse_email(content.strip())
        except ParserError as e:
            logger.error("Failed to decode message: %s", e)
            return 1
    else:
        result = BatchParser(config.parser).parse(content)
        logger.info("Parsed batch reply: %d sections", len(result))

    json.dump(to_jsonable(result), sys.stdout, indent=args.indent, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
