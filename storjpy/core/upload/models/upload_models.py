"""
Data models for upload module.

Uses dataclasses for type-safe data structures shared by the pipeline stages.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Any, Optional, List, Union, Sequence, Callable, Mapping, FrozenSet

from ...crypto import CipherSecret
from ...exceptions import (
    StorjException,
    JobError,
    ReplicationError,
    InvalidConcurrencyError,
    InvalidRedundancyError,
    InvalidChunkSizeError,
)


@dataclass
class WatchdogConfig:
    """
    Resource watchdog configuration.
    
    Attributes:
        poll_interval_ms: Interval between free-memory checks
        low_threshold_bytes: Free memory under which the session aborts
        enabled: Set False to run without a watchdog
    """
    poll_interval_ms: int = 3000
    low_threshold_bytes: int = 8_000_000
    enabled: bool = True


@dataclass
class UploadSessionConfig:
    """
    Configuration for a multi-file upload session.
    
    Attributes:
        bucket: Bucket the files are uploaded to
        selectors: Paths or glob patterns selecting the files
        file_concurrency: Maximum number of files in flight
        redundancy: Mirrors requested per shard (0 disables mirroring)
        max_token_retries: Retries allowed when a write token request fails
        chunk_size: Read size used when piping a file through the cipher
        watchdog: Resource watchdog settings
    """
    bucket: str
    selectors: Union[str, Path, Sequence[Union[str, Path]]]
    file_concurrency: int = 1
    redundancy: int = 0
    max_token_retries: int = 999
    chunk_size: int = 64 * 1024
    watchdog: WatchdogConfig = field(default_factory=WatchdogConfig)
    
    MIN_REDUNDANCY = 0
    MAX_REDUNDANCY = 12
    RECOMMENDED_MAX_CONCURRENCY = 6
    
    def __post_init__(self):
        """Normalize selectors to a list."""
        if isinstance(self.selectors, (str, Path)):
            self.selectors = [self.selectors]
        else:
            self.selectors = list(self.selectors)
    
    def validate(self) -> None:
        """
        Check numeric settings before any file I/O.
        
        Raises:
            InvalidConcurrencyError: If file_concurrency < 1
            InvalidRedundancyError: If redundancy is outside [0, 12]
            InvalidChunkSizeError: If chunk_size < 1
        """
        if self.file_concurrency < 1:
            raise InvalidConcurrencyError(self.file_concurrency)
        
        if not self.MIN_REDUNDANCY <= self.redundancy <= self.MAX_REDUNDANCY:
            raise InvalidRedundancyError(
                self.redundancy, self.MIN_REDUNDANCY, self.MAX_REDUNDANCY
            )
        
        if self.chunk_size < 1:
            raise InvalidChunkSizeError(self.chunk_size)


class JobState(str, Enum):
    """States of the per-file pipeline, in execution order."""
    ADMITTED = 'admitted'
    PREPARED = 'prepared'
    ENCRYPTED = 'encrypted'
    AUTHORIZED = 'authorized'
    STORED = 'stored'
    REPLICATED = 'replicated'
    DONE = 'done'
    ABORTED = 'aborted'
    
    @property
    def is_terminal(self) -> bool:
        return self in (JobState.DONE, JobState.ABORTED)
    
    def can_advance_to(self, target: 'JobState') -> bool:
        """Returns True if target is a legal next state."""
        if self.is_terminal:
            return False
        if target is JobState.ABORTED:
            return True
        return target in _TRANSITIONS[self]


_TRANSITIONS: Dict[JobState, FrozenSet[JobState]] = {
    JobState.ADMITTED: frozenset({JobState.PREPARED}),
    JobState.PREPARED: frozenset({JobState.ENCRYPTED}),
    JobState.ENCRYPTED: frozenset({JobState.AUTHORIZED}),
    JobState.AUTHORIZED: frozenset({JobState.STORED}),
    JobState.STORED: frozenset({JobState.REPLICATED, JobState.DONE}),
    JobState.REPLICATED: frozenset({JobState.DONE}),
}


@dataclass(frozen=True)
class StorageToken:
    """
    Single-use write authorization.
    
    Attributes:
        token: Token string passed to store_file
        bucket: Bucket the token is scoped to
        operation: Operation the token grants ('PUSH')
    """
    token: str
    bucket: str
    operation: str = 'PUSH'
    
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'StorageToken':
        """Create from bridge response dict."""
        return cls(
            token=data['token'],
            bucket=data.get('bucket', ''),
            operation=data.get('operation', 'PUSH')
        )


@dataclass(frozen=True)
class FileRecord:
    """
    File accepted by the storage network.
    
    Attributes:
        id: Durable file identifier
        filename: Name stored in the bucket
        size: Size in bytes
        mimetype: Content type reported by the bridge
    """
    id: str
    filename: str
    size: int
    mimetype: Optional[str] = None
    
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'FileRecord':
        """Create from bridge response dict."""
        return cls(
            id=data['id'],
            filename=data.get('filename', data.get('name', '')),
            size=int(data.get('size', 0)),
            mimetype=data.get('mimetype')
        )


@dataclass(frozen=True)
class ShardReplication:
    """Replication status of one shard."""
    hash: str
    status: str
    mirrors: int
    
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ShardReplication':
        return cls(
            hash=data['hash'],
            status=data.get('status', ''),
            mirrors=int(data.get('mirrors', 0))
        )


@dataclass
class Workspace:
    """
    Transient directory holding one job's ciphertext.
    
    The release action runs at most once; later calls are no-ops.
    """
    path: Path
    encrypted_path: Path
    on_release: Callable[["Workspace"], None] = field(repr=False)
    release_count: int = 0
    
    @property
    def released(self) -> bool:
        return self.release_count > 0
    
    def release(self) -> bool:
        """
        Run the release action.
        
        Returns:
            True if this call released the workspace
        """
        if self.released:
            return False
        self.release_count += 1
        self.on_release(self)
        return True


@dataclass
class UploadJob:
    """
    One file travelling through the pipeline.
    
    Owned exclusively by the session's job registry.
    """
    id: int
    source_path: Path
    filename: str
    state: JobState = JobState.ADMITTED
    workspace: Optional[Workspace] = None
    secret: Optional[CipherSecret] = field(default=None, repr=False)
    token_retries: int = 0
    token: Optional[StorageToken] = field(default=None, repr=False)
    file_record: Optional[FileRecord] = None
    replicas: List[ShardReplication] = field(default_factory=list)
    error: Optional[StorjException] = None
    replication_error: Optional[ReplicationError] = None
    history: List[JobState] = field(default_factory=list)
    
    def __post_init__(self):
        self.history.append(self.state)
    
    @property
    def is_open(self) -> bool:
        return not self.state.is_terminal
    
    @property
    def succeeded(self) -> bool:
        return self.state is JobState.DONE
    
    def advance(self, target: JobState) -> None:
        """
        Move to the next state.
        
        Raises:
            ValueError: If the transition is not allowed
        """
        if not self.state.can_advance_to(target):
            raise ValueError(
                f"Illegal transition for job {self.id}: {self.state.value} -> {target.value}"
            )
        self.state = target
        self.history.append(target)
    
    def abort(self, error: StorjException) -> None:
        """Move to ABORTED and record the error. No-op for terminal jobs."""
        if self.state.is_terminal:
            return
        self.error = error
        self.advance(JobState.ABORTED)


@dataclass
class UploadSession:
    """
    Counters and configuration of one invocation.
    
    Invariant: 0 <= uploaded_count <= discovered_count.
    """
    config: UploadSessionConfig
    files: List[Path] = field(default_factory=list)
    uploaded_count: int = 0
    aborted_count: int = 0
    
    @property
    def discovered_count(self) -> int:
        return len(self.files)
    
    @property
    def is_complete(self) -> bool:
        return self.discovered_count > 0 and self.uploaded_count == self.discovered_count
    
    def record_done(self) -> int:
        """Count one more uploaded file."""
        if self.uploaded_count >= self.discovered_count:
            raise ValueError("Uploaded count cannot exceed discovered count")
        self.uploaded_count += 1
        return self.uploaded_count
    
    def record_aborted(self) -> int:
        """Count one more aborted file."""
        self.aborted_count += 1
        return self.aborted_count


@dataclass(frozen=True)
class ProgressEvent:
    """Informational progress event published by the coordinator."""
    job_id: int
    filename: str
    state: JobState
    message: str = ''


@dataclass(frozen=True)
class UploadSummary:
    """
    Terminal result of a session.
    
    Attributes:
        discovered_count: Files selected for upload
        uploaded_count: Files that reached DONE
        aborted_count: Files that reached ABORTED
        error: First session-fatal error, None on a full pass
        last_file: Last file the session processed
        jobs: Every job created during the session
    """
    discovered_count: int
    uploaded_count: int
    aborted_count: int = 0
    error: Optional[StorjException] = None
    last_file: Optional[Path] = None
    jobs: List[UploadJob] = field(default_factory=list)
    
    @property
    def success(self) -> bool:
        """Returns True if no session-fatal error occurred and nothing was aborted."""
        return self.error is None and self.aborted_count == 0
    
    @property
    def job_errors(self) -> List[JobError]:
        """Errors of individual jobs that aborted."""
        return [job.error for job in self.jobs if isinstance(job.error, JobError)]
    
    def raise_for_error(self) -> None:
        """Raise the session-fatal error, if any."""
        if self.error is not None:
            raise self.error
