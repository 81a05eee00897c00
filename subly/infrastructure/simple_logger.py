"""Logger implementation on top of the standard logging module."""

import logging
from typing import Any

from ..ports.logger import LoggerPort


class SimpleLogger(LoggerPort):
    """Logger writing to a ``logging`` logger with context appended to messages.

    Context keyword arguments are passed through as ``extra`` for structured
    handlers and rendered as ``key=value`` pairs after the message.
    """

    def __init__(self, name: str = "subly", level: int = logging.INFO):
        """Initialize the logger.

        Args:
            name: Logger name (default: "subly")
            level: Logging level (default: INFO)
        """
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)

        if not self._logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    @staticmethod
    def _render(message: str, context: dict[str, Any]) -> str:
        if not context:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} | {pairs}"

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        self._logger.debug(self._render(message, kwargs), extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""
        self._logger.info(self._render(message, kwargs), extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""
        self._logger.warning(self._render(message, kwargs), extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log an error message."""
        self._logger.error(self._render(message, kwargs), extra=kwargs)

    def exception(self, message: str, exc_info: Exception | None = None, **kwargs: Any) -> None:
        """Log an exception with traceback."""
        self._logger.exception(
            self._render(message, kwargs), exc_info=exc_info or True, extra=kwargs
        )
