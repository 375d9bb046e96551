"""Upload models."""
from .upload_models import (
    WatchdogConfig,
    UploadSessionConfig,
    JobState,
    StorageToken,
    FileRecord,
    ShardReplication,
    Workspace,
    UploadJob,
    UploadSession,
    ProgressEvent,
    UploadSummary,
)

__all__ = [
    'WatchdogConfig',
    'UploadSessionConfig',
    'JobState',
    'StorageToken',
    'FileRecord',
    'ShardReplication',
    'Workspace',
    'UploadJob',
    'UploadSession',
    'ProgressEvent',
    'UploadSummary',
]
