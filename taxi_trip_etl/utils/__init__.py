"""Utility modules"""

from .logger import get_logger, setup_pipeline_logging, PerformanceLogger, timed_operation
from .exceptions import (
    PipelineError, ConfigurationError, TimezoneResolutionError, DataSourceError,
    ValidationError, HeaderValidationError, LoaderError, AuditWriteError,
    ProcessingError, handle_pipeline_exception, ErrorCollector
)
