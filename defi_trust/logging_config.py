"""Logging configuration for the DeFi trust engine."""

import logging
import sys
import time
import uuid
from typing import Optional

# Default log format
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_level: str = "INFO", log_format: Optional[str] = None):
    """Configure global logging settings.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format string
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    if log_format is None:
        log_format = DEFAULT_LOG_FORMAT

    # Configure root logger
    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        stream=sys.stdout
    )

    # Set third-party loggers to a higher level to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger
    """
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger,
                     level: str,
                     message: str,
                     **context) -> None:
    """Log a message with additional context information.

    The context is appended to the message as ``key=value`` pairs and also
    attached to the record under ``extra["context"]``.

    Args:
        logger: Logger instance
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        context: Additional context information as keyword arguments
    """
    log_method = getattr(logger, level.lower(), logger.info)
    if not context:
        log_method(message)
        return

    context_str = ", ".join(f"{k}={v!r}" for k, v in context.items())
    log_method(f"{message} [{context_str}]", extra={"context": context})


class RequestIdMiddleware:
    """ASGI middleware that tags each HTTP request with a request ID."""

    def __init__(self, app):
        """Initialize middleware.

        Args:
            app: ASGI application
        """
        self.app = app
        self.logger = get_logger("defi_trust.middleware")

    async def __call__(self, scope, receive, send):
        """Process request with added request ID.

        Args:
            scope: ASGI scope
            receive: ASGI receive function
            send: ASGI send function
        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())

        # Route handlers read it back from request.scope
        scope["request_id"] = request_id

        path = scope.get("path", "unknown")
        method = scope.get("method", "unknown")
        log_with_context(
            self.logger,
            "info",
            f"Request received: {method} {path}",
            request_id=request_id
        )

        start_time = time.perf_counter()

        async def wrapped_send(message):
            if message["type"] == "http.response.start":
                status = message.get("status", 0)
                duration = (time.perf_counter() - start_time) * 1000

                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode("latin-1")))
                message["headers"] = headers

                log_with_context(
                    self.logger,
                    "info",
                    f"Response: {status} - {duration:.2f}ms",
                    request_id=request_id,
                    method=method,
                    path=path
                )

            await send(message)

        await self.app(scope, receive, wrapped_send)
