import logging
import sys
from typing import ClassVar, TextIO


class Log:
    """Process-wide logger for the media pipeline.

    Keyword arguments passed to the helpers become attributes of the log
    record (``Log.error("...", source="a.jpg")`` sets ``record.source``), so
    handlers can filter or index batch items without parsing messages.
    """

    FORMAT: ClassVar[str] = "%(asctime)s %(name)s [%(levelname)s] %(message)s"

    _logger: ClassVar[logging.Logger] = logging.getLogger("mediaforge")
    _handler: ClassVar[logging.Handler | None] = None

    @classmethod
    def configure(cls, log_level: str, stream: TextIO | None = None) -> None:
        """Set the level and route records to ``stream`` (stdout by default).

        Calling it again replaces the handler installed by the previous call.
        """
        cls._logger.setLevel(log_level.upper())
        if cls._handler is not None:
            cls._logger.removeHandler(cls._handler)
        handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
        handler.setFormatter(logging.Formatter(cls.FORMAT))
        cls._logger.addHandler(handler)
        cls._handler = handler

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(message, extra=context)

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(message, extra=context)

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(message, extra=context)

    @classmethod
    def exception(cls, message: str, **context: object) -> None:
        """Log at error level with the traceback of the exception being handled."""
        cls._logger.exception(message, extra=context)

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(message, extra=context)
