"""
Custom exceptions for Storj upload operations.

This module defines the error taxonomy of the multi-file upload pipeline.
Session-fatal errors stop the whole run; job-level errors abort one file only.
"""
from pathlib import Path
from typing import Optional, Union


class StorjException(Exception):
    """Base exception for all storjpy errors."""
    
    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class ConfigurationError(StorjException):
    """Raised when the session configuration is invalid. Fatal, pre-flight."""
    pass


class InvalidConcurrencyError(ConfigurationError):
    """File concurrency is lower than 1."""
    
    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"File concurrency cannot be less than 1 (got {value})")


class InvalidRedundancyError(ConfigurationError):
    """Redundancy is outside the accepted mirror range."""
    
    def __init__(self, value: int, minimum: int = 0, maximum: int = 12) -> None:
        self.value = value
        super().__init__(
            f"{value} is an invalid redundancy value (expected {minimum}-{maximum})"
        )


class InvalidChunkSizeError(ConfigurationError):
    """Read chunk size is not positive."""
    
    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"Chunk size must be positive (got {value})")


class FileDiscoveryError(StorjException):
    """Raised when the file selection cannot be turned into a file list."""
    
    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        error_code: Optional[int] = None
    ) -> None:
        self.path = path
        super().__init__(message, error_code)


class FileNotFoundInSelectionError(FileDiscoveryError):
    """A selector did not match any existing file."""
    pass


class FileAccessError(FileDiscoveryError):
    """A selected file exists but is not readable."""
    pass


class EmptySelectionError(FileDiscoveryError):
    """The selection expanded to zero files."""
    pass


class JobError(StorjException):
    """
    Base class for errors scoped to a single upload job.
    
    Job errors abort the affected file only and never halt its siblings.
    """
    
    def __init__(
        self,
        message: str,
        filename: Optional[str] = None,
        error_code: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            filename: Display name of the file whose job failed
            error_code: Numeric error code (if available)
        """
        self.filename = filename
        super().__init__(message, error_code)


class WorkspaceError(JobError):
    """Local disk failure while preparing or encrypting a file."""
    pass


class AuthorizationError(JobError):
    """Write token could not be obtained within the retry cap."""
    
    def __init__(
        self,
        message: str,
        filename: Optional[str] = None,
        attempts: int = 0
    ) -> None:
        self.attempts = attempts
        super().__init__(message, filename)


class StorageError(JobError):
    """The storage network rejected the file or the transfer failed."""
    pass


class ReplicationError(JobError):
    """Mirror request failed. Logged only, the job stays successful."""
    pass


class ResourceExhaustionError(StorjException):
    """Raised when the resource watchdog aborts the whole session."""
    
    def __init__(
        self,
        message: str = "Not enough free memory to continue!",
        available: Optional[int] = None
    ) -> None:
        self.available = available
        super().__init__(message)
