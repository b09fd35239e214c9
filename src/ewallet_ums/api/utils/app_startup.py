import logging
import sys
from pathlib import Path

from loguru import logger

from ewallet_ums.runtime.config.config_data import ConfigData
from ewallet_ums.runtime.context import get_config


class InterceptHandler(logging.Handler):
    """Redirect standard 'logging' records (uvicorn, alembic, sqlalchemy) to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Request logs are written by the HTTP middleware
        if record.name == "uvicorn.access":
            return

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def resolve_log_level(config: ConfigData) -> str:
    if config.logging.level:
        return config.logging.level.upper()
    return "INFO" if config.app.environment == "production" else "DEBUG"


def resolve_log_format(config: ConfigData) -> str:
    if config.logging.format:
        return config.logging.format
    return "json" if config.app.environment == "production" else "plain"


def configure_logging(config: ConfigData | None = None) -> None:
    main_config = config or get_config()
    cfg = main_config.logging
    env = main_config.app.environment
    level = resolve_log_level(main_config)
    is_json = resolve_log_format(main_config) == "json"

    # Reset Loguru and guarantee a default request_id
    logger.remove()
    logger.configure(extra={"request_id": "-"})

    fmt_plain = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "[<cyan>{extra[request_id]}</cyan>] | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )
    debug_traces = env != "production"

    logger.add(
        sys.stderr,
        level=level,
        format="{message}" if is_json else fmt_plain,
        colorize=not is_json,
        serialize=is_json,
        backtrace=debug_traces,
        diagnose=debug_traces,
    )

    if cfg.file:
        path = Path(cfg.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(path),
            level=level,
            format="{message}" if is_json else fmt_plain,
            serialize=is_json,
            rotation=f"{cfg.max_size_mb} MB",
            retention=cfg.backup_count,
            compression="zip",
            enqueue=True,
            backtrace=debug_traces,
            diagnose=debug_traces,
        )

    # 'force=True' clears existing handlers; level=0 lets all records through
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in list(logging.root.manager.loggerDict.keys()):
        stdlog = logging.getLogger(name)
        stdlog.handlers = []
        stdlog.propagate = True

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.CRITICAL)

    logger.info(
        "Logging configured",
        app_level=level,
        app_format="json" if is_json else "plain",
        app_file=cfg.file,
        environment=env,
    )
