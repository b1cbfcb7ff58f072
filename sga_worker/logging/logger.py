import logging
import sys

# Client libraries that log every HTTP request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "openai")


class Log:
    """Process-wide logging facade for the worker."""

    _logger: logging.Logger = logging.getLogger("sga_worker")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Attach a stdout handler and set levels.

        Provider client loggers are held at WARNING unless running at DEBUG,
        so request lines do not drown the job log.
        """
        level = log_level.upper()
        cls._logger.setLevel(level)
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
            )
            cls._logger.addHandler(handler)
        quiet_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(quiet_level)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log at ERROR with the active traceback."""
        cls._logger.exception(message, extra=kwargs)
