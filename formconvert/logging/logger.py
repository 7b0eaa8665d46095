import logging
import sys

_NOISY_LOGGERS = ("httpx", "openai", "pdfminer", "psycopg.pool")


class Log:
    """Process-wide logging facade for the conversion worker."""

    _logger: logging.Logger = logging.getLogger("formconvert")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Attach a stdout handler at the given level and quiet chatty libraries."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)
        # pdfminer emits a DEBUG line per parsed object
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        """Log a progress message."""
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        """Log a failure without a traceback."""
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error message with the active exception's traceback."""
        cls._logger.exception(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        """Log a degradation the run recovered from."""
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        """Log prompts, raw responses and other verbose detail."""
        cls._logger.debug(message, extra=kwargs)
