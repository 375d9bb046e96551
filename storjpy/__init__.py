"""
StorjPy - Async multi-file uploader for the Storj bridge.

Usage:
    >>> from storjpy import UploadCoordinator, UploadSessionConfig, MemoryKeyRing
    >>> 
    >>> coordinator = UploadCoordinator(client, MemoryKeyRing())
    >>> summary = await coordinator.start(
    ...     UploadSessionConfig(bucket="bucket-id", selectors="photos/*.jpg")
    ... )
    >>> summary.raise_for_error()
"""
import logging

from .core.upload import (
    UploadCoordinator,
    UploadSessionConfig,
    WatchdogConfig,
    UploadSummary,
    JobState,
    ExponentialBackoffStrategy,
    ImmediateRetryStrategy,
)
from .core.keyring import KeyRing, MemoryKeyRing
from .core.crypto import CipherSecret, AesCtrCipherFactory
from .core.exceptions import (
    StorjException,
    ConfigurationError,
    FileDiscoveryError,
    WorkspaceError,
    AuthorizationError,
    StorageError,
    ReplicationError,
    ResourceExhaustionError,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for storjpy modules.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'storjpy',
        'storjpy.upload',
        'storjpy.upload.discovery',
        'storjpy.upload.workspace',
        'storjpy.upload.coordinator',
        'storjpy.upload.pipeline',
        'storjpy.upload.concurrency',
        'storjpy.upload.encryption',
        'storjpy.upload.token',
        'storjpy.upload.storage',
        'storjpy.upload.replication',
        'storjpy.upload.watchdog',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'UploadCoordinator',
    'UploadSessionConfig',
    'WatchdogConfig',
    'UploadSummary',
    'JobState',
    'ExponentialBackoffStrategy',
    'ImmediateRetryStrategy',
    'KeyRing',
    'MemoryKeyRing',
    'CipherSecret',
    'AesCtrCipherFactory',
    'StorjException',
    'ConfigurationError',
    'FileDiscoveryError',
    'WorkspaceError',
    'AuthorizationError',
    'StorageError',
    'ReplicationError',
    'ResourceExhaustionError',
    'setup_logging',
]
