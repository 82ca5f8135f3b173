from contextvars import ContextVar
from datetime import datetime
from enum import StrEnum
import logging
import os
import sys
from typing import TYPE_CHECKING
import zoneinfo

from loguru import logger as loguru_logger


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.constant.path import LOG_DIR
from src.platform.logging.service_context import get_service_context


# Use test log directory if in test environment
LOG_DIR = os.environ.get('TEST_LOG_DIR', LOG_DIR)


# Keys whose values never reach the log sinks
SENSITIVE_KEYWORDS = {
    'password',
    'token',
    'access_token',
    'secret',
    'photo_data',
    'evidence_photo',
}

# Max characters of a single logged value (photos arrive as multi-KB base64)
TRUNCATE_LENGTH = 300

chain_start_time_var: ContextVar[float] = ContextVar('first_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


def _level_for_access_log(message: str) -> str | None:
    """
    Map an ASGI access log line to a log level by its HTTP status.

    Format: '127.0.0.1:51234 - "POST /api/check-in HTTP/1.1" 409'
    """
    if '"' not in message or ' HTTP/' not in message:
        return None

    tail = message.rsplit('"', 1)[-1].split()
    if not tail or not tail[0].isdigit():
        return None

    status_code = int(tail[0])
    if status_code >= 500:
        return 'ERROR'
    if status_code >= 400:
        return 'WARNING'
    return 'INFO'


_intercept_bound_logger = None


def _get_intercept_bound_logger() -> 'LoguruLogger':
    global _intercept_bound_logger
    if _intercept_bound_logger is None:
        _intercept_bound_logger = loguru_logger.bind(
            **{
                ExtraField.SERVICE_CONTEXT: get_service_context(),
                ExtraField.CHAIN_START_TIME: '',
                ExtraField.CALL_TARGET: '',
            }
        )
    return _intercept_bound_logger


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        message = record.getMessage()

        if record.levelno <= logging.DEBUG:
            if 'Using selector:' in message:
                return
            # aiosqlite/httpcore chatter
            if record.name.startswith(('aiosqlite', 'httpcore', 'hpack')):
                return

        level = _level_for_access_log(message) if record.name.startswith('uvicorn') else None
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

        _get_intercept_bound_logger().opt(depth=depth, exception=record.exc_info).log(
            level, message
        )


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


loguru_logger.remove()
custom_logger = loguru_logger.bind(
    **{
        ExtraField.SERVICE_CONTEXT: get_service_context(),
        ExtraField.CHAIN_START_TIME: '',
        ExtraField.CALL_TARGET: '',
    }
)

min_log_level = 'DEBUG' if settings.DEBUG else 'INFO'

custom_logger.add(sys.stdout, format=io_log_format, level=min_log_level, enqueue=True)

# File sink only in DEBUG; production ships stdout
if settings.DEBUG:
    now_local = datetime.now(zoneinfo.ZoneInfo(settings.LOG_TIMEZONE))
    log_filename = (
        f'test_{now_local.strftime("%Y-%m-%d_%H")}.log'
        if os.environ.get('TEST_LOG_DIR')
        else f'{now_local.strftime("%Y-%m-%d_%H")}.log'
    )
    custom_logger.add(
        f'{LOG_DIR}/{log_filename}',
        format=io_log_format,
        rotation='1 hour',
        retention='7 days',
        compression='gz',
        enqueue=True,
        level=min_log_level,
    )

logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
