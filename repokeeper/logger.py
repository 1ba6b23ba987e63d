"""Logging setup for repokeeper.

Records from the service carry a fixed ``service`` tag and a free-form
``context`` mapping; handlers render them through ContextFormatter.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler

from repokeeper.config.schema import LoggingConfig

SERVICE_NAME = "GitService"
ROOT_LOGGER = "repokeeper"
SERVICE_LOGGER = "repokeeper.service"

PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Marks handlers installed by configure_logging so a second call replaces them
_HANDLER_FLAG = "_repokeeper_handler"


class ContextFormatter(logging.Formatter):
    """Formatter that appends the service tag and context payload."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        text = super().formatMessage(record)
        service = getattr(record, "service", None)
        if service:
            text = f"[{service}] {text}"
        context = getattr(record, "context", None)
        if context:
            pairs = " ".join(f"{key}={value!r}" for key, value in context.items())
            text = f"{text} {pairs}"
        return text


class ServiceLogAdapter(logging.LoggerAdapter):
    """Logger adapter stamping records with the service tag.

    Call sites pass structured data as ``context={...}``::

        log.info("Pushed %s to %s", branch, remote, context={"path": "."})
    """

    def __init__(self, logger: logging.Logger, service: str = SERVICE_NAME):
        super().__init__(logger, {"service": service})

    @property
    def service(self) -> str:
        return self.extra["service"]

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        context: Optional[Mapping[str, Any]] = kwargs.pop("context", None)
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("service", self.service)
        extra["context"] = dict(context or {})
        kwargs["extra"] = extra
        return msg, kwargs


def get_service_logger(service: str = SERVICE_NAME) -> ServiceLogAdapter:
    """Return the adapter used by RepositoryOperations."""
    return ServiceLogAdapter(logging.getLogger(SERVICE_LOGGER), service)


def configure_logging(config: Optional[LoggingConfig] = None, console: Optional[Console] = None) -> logging.Logger:
    """
    Install handlers on the ``repokeeper`` logger.

    Args:
        config: Logging settings. Defaults apply when omitted.
        console: Rich console for the RichHandler (stderr by default).

    Returns:
        The configured ``repokeeper`` logger.
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(config.level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = []
    if config.rich:
        rich_handler = RichHandler(console=console or Console(stderr=True), show_path=False, rich_tracebacks=True)
        rich_handler.setFormatter(ContextFormatter("%(message)s"))
        handlers.append(rich_handler)
    else:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(ContextFormatter(PLAIN_FORMAT))
        handlers.append(stream_handler)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(ContextFormatter(PLAIN_FORMAT))
        handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _HANDLER_FLAG, True)
        logger.addHandler(handler)

    return logger
