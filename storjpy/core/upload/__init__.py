"""
Upload module for multi-file Storj uploads.

Each discovered file runs through a fixed stage sequence (workspace,
encryption, authorization, storage, optional replication) under a bounded
concurrency budget, with a resource watchdog able to abort the session.
"""
from .coordinator import UploadCoordinator
from .discovery import FileDiscovery, DiscoveryResult
from .concurrency import ConcurrencyController
from .pipeline import JobPipeline
from .registry import JobRegistry
from .workspace import WorkspaceManager
from .watchdog import ResourceWatchdog, MemorySignal
from .retry import RetryStrategy, ImmediateRetryStrategy, ExponentialBackoffStrategy
from .models import (
    UploadSessionConfig,
    WatchdogConfig,
    UploadSummary,
    UploadJob,
    JobState,
    StorageToken,
    FileRecord,
    ShardReplication,
    ProgressEvent,
)
from .protocols import (
    StorageClient,
    CipherStreamFactory,
    ResourceSignal,
)

__all__ = [
    # Main classes
    'UploadCoordinator',
    'FileDiscovery',
    'DiscoveryResult',
    'ConcurrencyController',
    'JobPipeline',
    'JobRegistry',
    'WorkspaceManager',
    'ResourceWatchdog',
    'MemorySignal',
    
    # Retry
    'RetryStrategy',
    'ImmediateRetryStrategy',
    'ExponentialBackoffStrategy',
    
    # Models
    'UploadSessionConfig',
    'WatchdogConfig',
    'UploadSummary',
    'UploadJob',
    'JobState',
    'StorageToken',
    'FileRecord',
    'ShardReplication',
    'ProgressEvent',
    
    # Protocols
    'StorageClient',
    'CipherStreamFactory',
    'ResourceSignal',
]
