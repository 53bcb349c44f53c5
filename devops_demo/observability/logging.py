"""Logging for the demo service.

Everything goes to stdout through one stdlib handler so structlog events,
uvicorn records and the access log share a format: a readable console line
while ``NODE_ENV`` is ``development``, one JSON object per line anywhere else.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog
from starlette.datastructures import Headers

from devops_demo.config import Settings, get_settings


DEVELOPMENT = "development"

_CONFIGURED = False


def _coerce_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def select_renderer(environment: str) -> Any:
    if environment.strip().lower() == DEVELOPMENT:
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog + stdlib logging from ``LOG_LEVEL`` and ``NODE_ENV``.

    Safe to call multiple times (no-op after first call).
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    settings = settings or get_settings()
    level = _coerce_level(settings.log_level)

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=select_renderer(settings.environment),
        foreign_pre_chain=pre_chain,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    # uvicorn installs its own handlers; route them through ours.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.handlers = [handler]
        logger.propagate = False
        logger.setLevel(level)

    _CONFIGURED = True


def combined_log_line(
    *,
    remote_addr: str,
    method: str,
    url: str,
    http_version: str,
    status_code: int,
    content_length: str,
    referrer: str,
    user_agent: str,
    when: datetime | None = None,
) -> str:
    """Render one Apache combined-format access log line."""

    when = when or datetime.now(timezone.utc)
    stamp = when.strftime("%d/%b/%Y:%H:%M:%S %z")
    return (
        f'{remote_addr} - - [{stamp}] "{method} {url} HTTP/{http_version}" '
        f'{status_code} {content_length} "{referrer}" "{user_agent}"'
    )


def log_access(
    *,
    scope: dict[str, Any],
    status_code: int,
    content_length: str,
    elapsed_seconds: float,
) -> None:
    """Emit the access log event for one finished HTTP request."""

    headers = Headers(scope=scope)
    client = scope.get("client")
    remote_addr = client[0] if client else "-"
    path = scope.get("path", "")
    query = scope.get("query_string", b"").decode("latin-1")
    url = f"{path}?{query}" if query else path
    referrer = headers.get("referer", "-")
    user_agent = headers.get("user-agent", "-")

    structlog.get_logger("access").info(
        combined_log_line(
            remote_addr=remote_addr,
            method=scope.get("method", "GET"),
            url=url,
            http_version=scope.get("http_version", "1.1"),
            status_code=status_code,
            content_length=content_length,
            referrer=referrer,
            user_agent=user_agent,
        ),
        remote_addr=remote_addr,
        status_code=status_code,
        content_length=content_length,
        referrer=referrer,
        user_agent=user_agent,
        elapsed_ms=round(elapsed_seconds * 1000.0, 2),
    )
