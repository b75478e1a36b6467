"""
Logging Configuration Module for AgroInsight v1.0
=================================================
Provides logging setup with colored console output, rotating log files,
structured (JSON) logging and specialized loggers for the analysis engines.

Context fields added by ``LogContext`` live in a ``contextvars.ContextVar``
read by a single record factory installed on import, so analyses running in
separate threads never see each other's fields.
"""

import logging
import logging.handlers
import sys
import json
import inspect
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Dict, Any, Callable, Tuple
from functools import wraps

import colorlog
from pythonjsonlogger.json import JsonFormatter

if TYPE_CHECKING:
    from agroinsight.config import LoggingConfig


STATISTICS_LOGGER = 'agroinsight.statistics'
CORRELATIONS_LOGGER = 'agroinsight.correlations'
AUDIT_LOGGER = 'agroinsight.audit'

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class AgroInsightFormatter(logging.Formatter):
    """Custom formatter for AgroInsight logs"""

    def __init__(self, include_color: bool = True, fmt: str = DEFAULT_FORMAT):
        super().__init__()
        self.include_color = include_color

        if self.include_color:
            self.formatter = colorlog.ColoredFormatter(
                f'%(log_color)s{fmt}%(reset)s',
                datefmt='%Y-%m-%d %H:%M:%S',
                log_colors={
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                }
            )
        else:
            self.formatter = logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S')

    def format(self, record):
        return self.formatter.format(record)


def _structured_formatter() -> logging.Formatter:
    """JSON formatter for machine-readable logs"""
    return JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(module)s %(funcName)s %(lineno)d %(message)s'
    )


def setup_logging(log_level: str = 'INFO',
                  log_dir: Optional[Path] = None,
                  console_output: bool = True,
                  file_output: bool = False,
                  structured_logs: bool = False,
                  log_format: str = DEFAULT_FORMAT,
                  max_file_size_mb: int = 10,
                  backup_count: int = 5) -> logging.Logger:
    """Setup logging configuration for AgroInsight

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (required when file_output is True)
        console_output: Enable console logging
        file_output: Enable file logging
        structured_logs: Use JSON structured logging
        log_format: Format string of the plain-text handlers
        max_file_size_mb: Size at which the main log file rotates
        backup_count: Rotated main log files to keep

    Returns:
        Logger instance
    """
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    # Console handler
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        if structured_logs:
            console_handler.setFormatter(_structured_formatter())
        else:
            console_handler.setFormatter(AgroInsightFormatter(include_color=True, fmt=log_format))

        root_logger.addHandler(console_handler)

    # File handlers
    if file_output:
        if log_dir is None:
            raise ValueError("log_dir is required when file_output is enabled")
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        # Main log file with rotation
        main_log_file = log_dir / f"agroinsight_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.handlers.RotatingFileHandler(
            main_log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)

        if structured_logs:
            file_handler.setFormatter(_structured_formatter())
        else:
            file_handler.setFormatter(AgroInsightFormatter(include_color=False, fmt=log_format))

        root_logger.addHandler(file_handler)

        # Error log file
        error_handler = logging.handlers.RotatingFileHandler(
            log_dir / "errors.log",
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(AgroInsightFormatter(include_color=False, fmt=log_format))
        root_logger.addHandler(error_handler)

    create_specialized_loggers(log_level)
    configure_external_loggers()

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized - Level: {log_level}, Console: {console_output}, File: {file_output}")

    return logger


def setup_logging_from_config(settings: 'LoggingConfig') -> logging.Logger:
    """Setup logging from the ``logging`` section of a Config"""
    return setup_logging(
        log_level=settings.level,
        log_dir=settings.log_dir,
        console_output=settings.console_output,
        file_output=settings.file_output,
        structured_logs=settings.structured_logs,
        log_format=settings.format,
        max_file_size_mb=settings.max_file_size_mb,
        backup_count=settings.backup_count,
    )


def create_specialized_loggers(log_level: str):
    """Create specialized loggers for the analysis engines"""
    level = getattr(logging, log_level.upper())

    # Descriptive statistics and hypothesis tests
    logging.getLogger(STATISTICS_LOGGER).setLevel(level)

    # Correlation discovery
    logging.getLogger(CORRELATIONS_LOGGER).setLevel(level)

    # Audit trail of analysis runs
    logging.getLogger(AUDIT_LOGGER).setLevel(logging.INFO)  # Always INFO for audit


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance

    Args:
        name: Logger name (default: caller's module)

    Returns:
        Logger instance
    """
    if name is None:
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get('__name__', 'agroinsight')

    return logging.getLogger(name)


def get_statistics_logger() -> logging.Logger:
    """Get the statistics-specific logger"""
    return logging.getLogger(STATISTICS_LOGGER)


def get_correlations_logger() -> logging.Logger:
    """Get the correlation-specific logger"""
    return logging.getLogger(CORRELATIONS_LOGGER)


def get_audit_logger() -> logging.Logger:
    """Get the audit logger"""
    return logging.getLogger(AUDIT_LOGGER)


def log_function_call(func: Optional[Callable] = None,
                      log_args: bool = False,
                      log_result: bool = False,
                      log_time: bool = True):
    """Decorator to log function calls

    Args:
        func: Function to decorate
        log_args: Log function arguments
        log_result: Log function result
        log_time: Log execution time
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            logger = get_logger(f.__module__)

            msg = f"Calling {f.__name__}"
            if log_args:
                msg += f" with args={args}, kwargs={kwargs}"
            logger.debug(msg)

            start_time = datetime.now()
            try:
                result = f(*args, **kwargs)
            except Exception as e:
                duration = (datetime.now() - start_time).total_seconds()
                logger.error(f"{f.__name__} failed after {duration:.2f}s: {str(e)}", exc_info=True)
                raise

            duration = (datetime.now() - start_time).total_seconds()
            msg = f"{f.__name__} completed"
            if log_time:
                msg += f" in {duration:.2f}s"
            if log_result:
                msg += f" with result={result}"
            logger.debug(msg)
            return result

        return wrapper

    if func is None:
        return decorator
    return decorator(func)


def create_audit_log(action: str,
                     user: Optional[str] = None,
                     details: Optional[Dict[str, Any]] = None,
                     status: str = 'success') -> Dict[str, Any]:
    """Create an audit log entry

    Args:
        action: Action performed
        user: User who performed the action
        details: Additional details
        status: Status of the action (success, failure, warning)

    Returns:
        The audit entry that was logged
    """
    audit_entry = {
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'action': action,
        'user': user or 'system',
        'status': status,
        'details': details or {}
    }

    get_audit_logger().info(json.dumps(audit_entry, default=str))
    return audit_entry


# Active LogContext layers of the current thread/task, innermost last
_context_layers: ContextVar[Tuple['LogContext', ...]] = ContextVar('agroinsight_log_context', default=())


def _install_context_record_factory():
    base_factory = logging.getLogRecordFactory()
    if getattr(base_factory, '_agroinsight_context', False):
        return

    def record_factory(*args, **kwargs):
        record = base_factory(*args, **kwargs)
        for layer in _context_layers.get():
            for key, value in layer.context.items():
                setattr(record, key, value)
        return record

    record_factory._agroinsight_context = True
    logging.setLogRecordFactory(record_factory)


_install_context_record_factory()


class LogContext:
    """Context manager for adding context fields (species, dataset_name) to log records

    Fields are visible only in the thread (or asyncio task) that entered the
    context.
    """

    def __init__(self, **kwargs):
        self.context = kwargs

    def __enter__(self):
        _context_layers.set(_context_layers.get() + (self,))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _context_layers.set(tuple(layer for layer in _context_layers.get() if layer is not self))


def configure_external_loggers(level: str = 'WARNING'):
    """Configure logging levels for external libraries

    Args:
        level: Log level for external libraries
    """
    external_loggers = [
        'numexpr',
        'joblib',
        'matplotlib',
        'statsmodels',
    ]

    for logger_name in external_loggers:
        logging.getLogger(logger_name).setLevel(getattr(logging, level.upper()))
