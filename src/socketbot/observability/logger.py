"""
observability/logger.py — socketbot Structured Logger

Sets up structlog with:
  - JSON output to a rotating log file
  - Human-readable output to console (dev mode) or JSON (prod mode)
  - Envelope context (envelope_id, envelope_type) on every line logged
    while one envelope is being dispatched

Usage:
    from socketbot.observability.logger import get_logger, setup_logging

    setup_logging(level="INFO")            # call once at startup
    log = get_logger(__name__)
    log.info("socketmode.hello", num_connections=1)
    log.warning("socketmode.decode_failed", error="unknown envelope type")
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional

import structlog

# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[str | Path] = "./data/logs",
    json_format: bool = False,
    console_output: bool = True,
    max_bytes: int = 100 * 1024 * 1024,   # 100 MB
    backup_count: int = 5,
) -> None:
    """
    Configure structlog and stdlib logging. Call once at application startup.

    Args:
        level:          Log level string: DEBUG | INFO | WARNING | ERROR | CRITICAL
        log_dir:        Directory for the rotating log file. None disables file logging.
        json_format:    If True, console also emits JSON (production mode).
                        If False, console uses coloured human-readable format (dev mode).
        console_output: Whether to emit logs to stderr at all.
        max_bytes:      Max size of the log file before rotation.
        backup_count:   Number of rotated log files to keep.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # ── File handler (always JSON) ────────────────────────────────────────────
    handlers: list[logging.Handler] = []

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path / "socketbot.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer(), shared_processors))
        handlers.append(file_handler)

    # ── Console handler (JSON or pretty) ─────────────────────────────────────
    # stdout is left alone; diagnostics go to stderr.
    if console_output:
        console_renderer = (
            structlog.processors.JSONRenderer()
            if json_format
            else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        )
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(_formatter(console_renderer, shared_processors))
        handlers.append(console_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=handlers,
        force=True,
    )

    # websockets logs every frame at DEBUG; keep it quieter than our own output.
    logging.getLogger("websockets").setLevel(max(numeric_level, logging.INFO))
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _formatter(renderer: Any, shared_processors: list[Any]) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )


def get_logger(name: str = "socketbot", **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a bound logger with optional initial context values.

    Example:
        log = get_logger(__name__, component="session")
        log.info("socketmode.connected", url="wss://…")
        # → {"event": "socketmode.connected", "url": "wss://…",
        #    "component": "session", "logger": "socketbot.socketmode.session", ...}
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


def bind_envelope(envelope_id: Optional[str], envelope_type: str) -> None:
    """
    Bind envelope context to all subsequent log calls in this async context.

    Call this when dispatch of one envelope starts; pair with clear_envelope().
    """
    structlog.contextvars.bind_contextvars(
        envelope_type=envelope_type,
        envelope_id=envelope_id or "-",
    )


def clear_envelope() -> None:
    """Drop the envelope context bound by bind_envelope()."""
    structlog.contextvars.unbind_contextvars("envelope_type", "envelope_id")
