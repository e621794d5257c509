"""
main.py — socketbot Entry Point

Usage:
    python -m socketbot                          # default settings
    python -m socketbot --log-level DEBUG        # verbose logging
    python -m socketbot --config path/to/config.yaml

Exit codes:
    0    the platform sent `disconnect`
    1    configuration, handshake or transport failure
    130  interrupted
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

import httpx
from dotenv import load_dotenv


def _find_env_file() -> Path | None:
    """Walk up from CWD looking for .env file."""
    cwd = Path.cwd()
    for d in [cwd, *cwd.parents]:
        candidate = d / ".env"
        if candidate.is_file():
            return candidate
    return None


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="socketbot",
        description="socketbot: Slack Socket Mode echo bot",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: $SOCKETBOT_CONFIG or config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override log level from config",
    )
    return parser.parse_args(argv)


def bootstrap(args: argparse.Namespace):
    """
    Load config, validate it fully, and set up logging.
    Returns (settings, log) ready for use.

    Exits with code 1 (after printing a clear message) if:
      - config.yaml has invalid values (Pydantic ValidationError)
      - cross-field problems are found (ConfigError from validate_all())
    """
    import yaml
    from pydantic import ValidationError

    from socketbot.config.settings import ConfigError, load_settings
    from socketbot.observability.logger import get_logger, setup_logging

    # -- Load and parse -------------------------------------------------------
    try:
        settings = load_settings(args.config)
    except ValidationError as exc:
        problems = "\n".join(
            f"  • {'.'.join(str(p) for p in e['loc']) or '?'}: {e['msg']}"
            for e in exc.errors()
        )
        print(
            f"\n❌  Config validation failed:\n\n{problems}\n\n"
            f"    Fix config/config.yaml or your .env file and restart.\n",
            file=sys.stderr,
        )
        sys.exit(1)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"\n❌  Failed to load config: {type(exc).__name__}: {exc}\n", file=sys.stderr)
        sys.exit(1)

    # -- Cross-field validation -----------------------------------------------
    try:
        settings.validate_all()
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)

    # -- Logging --------------------------------------------------------------
    # CLI --log-level flag overrides config.yaml
    setup_logging(
        level=args.log_level or settings.log_level,
        log_dir=settings.log_dir,
        json_format=settings.log_json_format,
        console_output=settings.log_console_output,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.logging.backup_count,
    )

    log = get_logger("socketbot.main")
    return settings, log


async def run_session(settings, log) -> None:
    """Wire the web client, echo handler and session, then run one session."""
    from socketbot.interfaces.echo import EchoHandler
    from socketbot.notifier import SlackWebClient
    from socketbot.socketmode.session import SocketModeSession

    credentials = settings.credentials()
    async with httpx.AsyncClient(timeout=settings.slack.request_timeout_seconds) as http:
        web = SlackWebClient(
            credentials.bot_token,
            client=http,
            api_base_url=settings.slack.api_base_url,
        )
        session = SocketModeSession(
            credentials,
            EchoHandler(web, settings.echo.template),
            http_client=http,
            api_base_url=settings.slack.api_base_url,
            max_frame_bytes=settings.slack.max_frame_bytes,
            open_timeout=settings.slack.open_timeout_seconds,
        )
        log.info("socketbot.session_starting", api_base_url=settings.slack.api_base_url)
        await session.run()
        log.info("socketbot.session_ended", reason=session.disconnect_reason)


async def main(argv: Optional[Sequence[str]] = None) -> int:
    from socketbot.exceptions import SocketBotError

    # .env must be loaded before Settings is constructed.
    env_path = _find_env_file()
    if env_path:
        load_dotenv(dotenv_path=env_path)

    args = parse_args(argv)
    settings, log = bootstrap(args)
    log.info("socketbot.starting")

    try:
        await run_session(settings, log)
    except SocketBotError as exc:
        log.error("socketbot.fatal", error=str(exc), error_type=type(exc).__name__)
        print(f"\n❌  {type(exc).__name__}: {exc}\n", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, asyncio.CancelledError):
        log.info("socketbot.interrupted")
        return 130

    return 0


def cli() -> None:
    """Console-script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
