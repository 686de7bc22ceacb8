# taxi_trip_etl/utils/logger.py
"""
Centralized logging configuration for the NYC Taxi Trip ETL

Console output is JSON lines (plain text at DEBUG). With a log directory the
run also writes a rotating main log and a rotating errors-only log. Stage
timings and row counts go through PerformanceLogger under `performance.*`.
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# (file name, minimum level, max bytes, backups kept)
LOG_FILES = (
    ('taxi_trip_etl.log', logging.INFO, 50 * 1024 * 1024, 10),
    ('errors.log', logging.ERROR, 10 * 1024 * 1024, 5),
)

QUIET_LOGGERS = ('snowflake', 'urllib3')

# Attributes every LogRecord carries; anything else arrived through `extra`
_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'getMessage',
    'exc_info', 'exc_text', 'stack_info', 'taskName', 'message'
])


class JSONFormatter(logging.Formatter):
    """
    Formats each record as one JSON object per line

    Fields passed through `extra` (stage metrics, row counts, error codes)
    are merged into the top level of the entry.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry = {
            'timestamp': created.strftime('%Y-%m-%dT%H:%M:%S.') + f"{int(record.msecs):03d}Z",
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}.{record.funcName}:{record.lineno}"
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        log_entry.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        )

        # Decimal and datetime metrics are rendered as strings
        return json.dumps(log_entry, default=str)


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if level == logging.DEBUG:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    else:
        handler.setFormatter(JSONFormatter())
    return handler


def _file_handler(path: Path, level: int, max_bytes: int, backup_count: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_pipeline_logging(log_level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """
    Configure the root logger for a pipeline run

    Call this once at the start of your application. Handlers installed by an
    earlier call are replaced.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for rotating log files; console only when None
    """
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    root_logger.addHandler(_console_handler(level))

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        for filename, file_level, max_bytes, backup_count in LOG_FILES:
            root_logger.addHandler(
                _file_handler(log_path / filename, file_level, max_bytes, backup_count)
            )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass __name__"""
    return logging.getLogger(name)


class PerformanceLogger:
    """
    Structured metrics for one pipeline component

    Records are emitted on `performance.<name>` with a `metrics_type` of
    stage, data or error so they can be filtered apart downstream.
    """

    def __init__(self, logger_name: str):
        self.logger = logging.getLogger(f"performance.{logger_name}")

    def log_stage(self, stage: str, duration_seconds: float, success: bool = True, **metrics) -> None:
        """
        Log the outcome and duration of one pipeline stage

        Args:
            stage: Stage name, e.g. clean_trips or load_trips
            duration_seconds: Wall-clock duration of the stage
            success: Whether the stage finished without raising
            **metrics: Additional fields for the record
        """
        outcome = "completed" if success else "failed"
        self.logger.log(
            logging.INFO if success else logging.WARNING,
            f"Stage {stage} {outcome} in {duration_seconds:.3f}s",
            extra={
                'metrics_type': 'stage',
                'stage': stage,
                'duration_seconds': round(duration_seconds, 3),
                'success': success,
                **metrics
            }
        )

    def log_data_metrics(self, **metrics) -> None:
        """Log row counts of a cleaning run"""
        self.logger.info("Data metrics", extra={'metrics_type': 'data', **metrics})

    def log_error_metrics(self, error_code: str, error_message: str, **context) -> None:
        """
        Log a structural failure for monitoring

        Args:
            error_code: PipelineError code, e.g. MISSING_COLUMNS
            error_message: Human-readable message
            **context: Additional context information
        """
        self.logger.error("Error occurred", extra={
            'metrics_type': 'error',
            'error_code': error_code,
            'error_message': error_message,
            **context
        })


class timed_operation:
    """
    Context manager that times a pipeline stage and logs it on exit

    Exceptions are never swallowed; a stage that raises is logged as failed.

    Usage:
        with timed_operation("clean_trips", logger) as timer:
            ...
        print(timer.duration)
    """

    def __init__(self, operation_name: str, logger: logging.Logger):
        self.operation_name = operation_name
        self.logger = logger
        self.performance_logger = PerformanceLogger(logger.name)
        self.duration = 0.0
        self._started = 0.0

    def __enter__(self):
        self.logger.debug(f"Starting {self.operation_name}")
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self._started
        self.performance_logger.log_stage(
            self.operation_name,
            self.duration,
            success=exc_type is None,
            error_type=exc_type.__name__ if exc_type else None
        )
        return False
