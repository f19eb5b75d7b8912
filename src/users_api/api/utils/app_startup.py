"""Loguru setup for the API process."""

import logging
import sys
from pathlib import Path

from loguru import logger

from src.users_api.runtime.config.config_data import LoggingConfig
from src.users_api.runtime.context import get_config

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

# Stdlib loggers whose output duplicates the request middleware
SILENCED_LOGGERS = ("uvicorn.access",)


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        if record.name in SILENCED_LOGGERS:
            return

        level: str | int
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame, depth = logging.currentframe(), 0
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _add_file_sink(cfg: LoggingConfig, verbose_tracebacks: bool) -> None:
    path = Path(cfg.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    serialize = cfg.format == "json"
    logger.add(
        path,
        level=cfg.level,
        format="{message}" if serialize else CONSOLE_FORMAT,
        serialize=serialize,
        rotation=f"{cfg.max_size_mb} MB",
        retention=cfg.backup_count,
        enqueue=True,
        backtrace=verbose_tracebacks,
        diagnose=verbose_tracebacks,
    )


def configure_logging() -> None:
    """Install loguru sinks for the active configuration.

    Always logs to stderr; adds a rotating file sink when ``logging.file`` is
    set. Records from the stdlib ``logging`` module (uvicorn, httpx) are routed
    through loguru as well.
    """
    config = get_config()
    cfg = config.logging
    verbose_tracebacks = not config.app.is_production

    logger.remove()
    logger.configure(extra={"request_id": "-"})
    logger.add(
        sys.stderr,
        level=cfg.level,
        format=CONSOLE_FORMAT,
        colorize=True,
        backtrace=verbose_tracebacks,
        diagnose=verbose_tracebacks,
    )
    if cfg.file:
        _add_file_sink(cfg, verbose_tracebacks)

    logging.basicConfig(handlers=[InterceptHandler()], level=logging.NOTSET, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        stdlog = logging.getLogger(name)
        stdlog.handlers = []
        stdlog.propagate = True
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.bind(level=cfg.level, file=cfg.file, environment=config.app.environment).info(
        "Logging configured"
    )
