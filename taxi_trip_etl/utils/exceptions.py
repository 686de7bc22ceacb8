# taxi_trip_etl/utils/exceptions.py
"""
Custom exceptions for the NYC Taxi Trip ETL
"""

from typing import Optional, Dict, Any


class PipelineError(Exception):
    """
    Base exception for all pipeline errors

    Every structural failure of a run surfaces as a subclass of this error,
    carrying enough context to tell the operator what to fix.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize pipeline error

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code for categorization
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context,
            'cause': str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        base_msg = f"{self.error_code}: {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" (Context: {context_str})"
        if self.cause:
            base_msg += f" (Caused by: {self.cause})"
        return base_msg


class ConfigurationError(PipelineError):
    """
    Raised when there are configuration issues

    Examples:
    - Missing Snowflake credentials when a load is requested
    - Invalid numeric settings in the environment
    """
    pass


class TimezoneResolutionError(ConfigurationError):
    """Raised when the configured source timezone cannot be resolved"""
    pass


class DataSourceError(PipelineError):
    """
    Raised when the input file cannot be read

    Examples:
    - Input file not found
    - Input file unreadable (permissions, is a directory)
    - Tokenizer failure that cannot be recovered row by row
    """
    pass


class ValidationError(PipelineError):
    """
    Raised when input validation fails at the structural level

    Row-level problems never raise; they are counted and skipped.
    """
    pass


class HeaderValidationError(ValidationError):
    """Raised when the input header is missing or lacks required columns"""
    pass


class LoaderError(PipelineError):
    """
    Raised during data loading operations

    Examples:
    - Database connection failures
    - SQL execution errors
    - Bulk load failures
    """
    pass


class AuditWriteError(PipelineError):
    """Raised when the duplicates audit file cannot be written"""
    pass


class ProcessingError(PipelineError):
    """
    Raised during data processing operations

    Examples:
    - Data transformation failures
    - Memory allocation issues
    """
    pass


# Utility functions for exception handling

def handle_pipeline_exception(
    func_name: str,
    exception: Exception,
    context: Optional[Dict[str, Any]] = None
) -> PipelineError:
    """
    Convert generic exceptions to pipeline-specific exceptions

    Args:
        func_name: Name of the function where error occurred
        exception: Original exception
        context: Additional context information

    Returns:
        Appropriate PipelineError subclass
    """
    if isinstance(exception, PipelineError):
        return exception

    error_context = {
        'function': func_name,
        **(context or {})
    }

    if isinstance(exception, FileNotFoundError):
        return DataSourceError(
            f"File not found in {func_name}: {str(exception)}",
            error_code="FILE_NOT_FOUND",
            context=error_context,
            cause=exception
        )

    elif isinstance(exception, PermissionError):
        return DataSourceError(
            f"Permission denied in {func_name}: {str(exception)}",
            error_code="PERMISSION_DENIED",
            context=error_context,
            cause=exception
        )

    elif isinstance(exception, ValueError):
        return ValidationError(
            f"Data validation error in {func_name}: {str(exception)}",
            error_code="VALIDATION_ERROR",
            context=error_context,
            cause=exception
        )

    elif isinstance(exception, MemoryError):
        return ProcessingError(
            f"Memory error in {func_name}: {str(exception)}",
            error_code="MEMORY_ERROR",
            context=error_context,
            cause=exception
        )

    else:
        return PipelineError(
            f"Unexpected error in {func_name}: {str(exception)}",
            error_code="UNKNOWN_ERROR",
            context=error_context,
            cause=exception
        )


class ErrorCollector:
    """
    Collects non-fatal observations made during a run

    Row-level problems (bad rows, incomplete rows, unrecognized flags) are
    reported here as warnings instead of failing the run.
    """

    def __init__(self):
        self.warnings = []

    def add_warning(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Add a warning to the collection"""
        self.warnings.append({
            'message': message,
            'context': context or {}
        })

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    @property
    def warning_count(self) -> int:
        return len(self.warnings)
