from contextvars import ContextVar
from datetime import datetime, timezone
from enum import StrEnum
import logging
import sys

from loguru import logger as loguru_logger

from src.platform.config.core_setting import settings
from src.platform.constant.path import LOG_DIR
from src.platform.logging.service_context import get_service_context


# Constants and shared variables for LoguruIO
SENSITIVE_KEYWORDS = {
    'card_number',
    'cvv',
    'payment_token',
}

chain_start_time_var: ContextVar[float] = ContextVar('first_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


# Loggers whose DEBUG output is per-operation noise (event loop setup, every aiosqlite cursor call)
QUIET_DEBUG_LOGGERS = ('asyncio', 'aiosqlite')


def access_log_level(record: logging.LogRecord) -> str | None:
    """
    Log level for a uvicorn access record, chosen by response status.

    uvicorn.access records carry
    (client_addr, method, full_path, http_version, status_code) as args.
    409 and 404 are routine booking outcomes, so only 5xx is raised above WARNING.
    """
    if record.name != 'uvicorn.access' or not isinstance(record.args, tuple):
        return None
    if len(record.args) < 5 or not isinstance(record.args[4], int):
        return None

    status_code = record.args[4]
    if status_code >= 500:
        return 'ERROR'
    if status_code >= 400:
        return 'WARNING'
    return 'INFO'


class InterceptHandler(logging.Handler):
    """Route stdlib logging (uvicorn, SQLAlchemy, asyncio) into the loguru sinks"""

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno <= logging.DEBUG and record.name.startswith(QUIET_DEBUG_LOGGERS):
            return

        level = access_log_level(record)
        if level is None:
            try:
                level = loguru_logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        custom_logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


# Log format for LoguruIO decorated functions
io_log_format = ' | '.join(
    (
        f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
        '<lvl>{level:<8}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
        '{message}',
        '<lk>{elapsed}</>',
        f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>',
    )
)


# Configure logger
loguru_logger.remove()  # Remove default handler to avoid duplicate output and use custom format
custom_logger = loguru_logger.bind(
    **{
        ExtraField.SERVICE_CONTEXT: get_service_context(),
        ExtraField.CHAIN_START_TIME: '',
        ExtraField.CALL_TARGET: '',
    }
)

min_log_level = 'DEBUG' if settings.DEBUG else 'INFO'

custom_logger.add(sys.stdout, format=io_log_format, level=min_log_level, enqueue=True)

# File output only in DEBUG mode; production ships stdout to the log collector
if settings.DEBUG:
    custom_logger.add(
        f'{LOG_DIR}/{datetime.now(timezone.utc).strftime("%Y-%m-%d_%H")}.log',
        format=io_log_format,
        rotation='1 hour',
        retention='7 days',
        compression='gz',
        enqueue=True,
        level=min_log_level,
    )

# Intercept standard logging → loguru
logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
