"""
Per-job pipeline.

Drives one upload job through its fixed stage sequence:

    ADMITTED -> PREPARED -> ENCRYPTED -> AUTHORIZED -> STORED -> [REPLICATED] -> DONE

Each stage takes the job and returns the next state. Any failure moves the
job to ABORTED; the workspace is released exactly once on every path.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from ..events import EventEmitter
from ..exceptions import (
    StorjException,
    JobError,
    ReplicationError,
    ResourceExhaustionError,
)
from .models import UploadJob, JobState, ProgressEvent
from .registry import JobRegistry
from .workspace import WorkspaceManager
from .services import EncryptionService, TokenService, StorageService, ReplicationService

logger = logging.getLogger('storjpy.upload.pipeline')

Stage = Callable[[UploadJob], Awaitable[JobState]]


class JobPipeline:
    """
    State machine shared by all jobs of a session.
    
    Holds the session abort flag. A running step is never interrupted;
    jobs observe the flag between steps and abort themselves.
    """
    
    def __init__(
        self,
        registry: JobRegistry,
        workspaces: WorkspaceManager,
        encryption: EncryptionService,
        tokens: TokenService,
        storage: StorageService,
        replication: ReplicationService,
        bucket: str,
        redundancy: int = 0,
        events: Optional[EventEmitter] = None
    ):
        self._registry = registry
        self._workspaces = workspaces
        self._encryption = encryption
        self._tokens = tokens
        self._storage = storage
        self._replication = replication
        self._bucket = bucket
        self._redundancy = redundancy
        self._events = events
        
        self._abort_event = asyncio.Event()
        self._abort_error: Optional[ResourceExhaustionError] = None
        
        self._stages: Dict[JobState, Stage] = {
            JobState.ADMITTED: self._prepare,
            JobState.PREPARED: self._encrypt,
            JobState.ENCRYPTED: self._authorize,
            JobState.AUTHORIZED: self._store,
            JobState.STORED: self._replicate,
            JobState.REPLICATED: self._finish,
        }
    
    @property
    def aborted(self) -> bool:
        return self._abort_event.is_set()
    
    @property
    def abort_error(self) -> Optional[ResourceExhaustionError]:
        return self._abort_error
    
    def abort(self, error: ResourceExhaustionError) -> None:
        """Raise the session abort flag. Only the first error is kept."""
        if self._abort_error is None:
            self._abort_error = error
        self._abort_event.set()
    
    async def run(self, job: UploadJob) -> UploadJob:
        """
        Run a job until it reaches DONE or ABORTED.
        
        Job-level errors, including unexpected collaborator failures, are
        recorded on the job and not raised.
        
        Raises:
            asyncio.CancelledError: Re-raised after the job is aborted
        """
        try:
            while job.is_open:
                if self.aborted:
                    raise self._abort_error
                stage = self._stages[job.state]
                next_state = await stage(job)
                self._transition(job, next_state)
        except asyncio.CancelledError:
            self.fail(job, self._abort_error or ResourceExhaustionError("Upload cancelled"))
            raise
        except ResourceExhaustionError as e:
            self.fail(job, self._abort_error or e)
        except JobError as e:
            self.fail(job, e)
        except Exception as e:
            logger.exception(f"[ {job.filename} ] Unexpected failure")
            error = JobError(f"Unexpected failure: {e}", filename=job.filename)
            error.__cause__ = e
            self.fail(job, error)
        finally:
            if job.workspace is not None and not job.workspace.released:
                self._cleanup(job)
        return job
    
    def fail(self, job: UploadJob, error: StorjException) -> None:
        """Move a job to ABORTED."""
        if job.state.is_terminal:
            return
        logger.error(f"[ {job.filename} ] Upload aborted in state {job.state.value}: {error}")
        self._registry.mark_aborted(job, error)
        self._emit(job, str(error))
    
    def _transition(self, job: UploadJob, next_state: JobState) -> None:
        if next_state is JobState.DONE:
            session = self._registry.session
            uploaded = self._registry.mark_done(job)
            logger.info(f"{uploaded} of {session.discovered_count} files uploaded")
            if session.is_complete:
                logger.info("Done.")
        else:
            job.advance(next_state)
        self._emit(job)
    
    def _cleanup(self, job: UploadJob) -> None:
        logger.info(f"[ {job.filename} ] Cleaning up...")
        job.workspace.release()
        logger.info(f"[ {job.filename} ] Finished cleaning!")
    
    def _emit(self, job: UploadJob, message: str = '') -> None:
        if self._events is not None:
            self._events.emit(
                'progress',
                ProgressEvent(job_id=job.id, filename=job.filename, state=job.state, message=message)
            )
    
    async def _prepare(self, job: UploadJob) -> JobState:
        job.workspace = self._workspaces.allocate(job.filename)
        return JobState.PREPARED
    
    async def _encrypt(self, job: UploadJob) -> JobState:
        await self._encryption.encrypt(job, self._abort_event)
        return JobState.ENCRYPTED
    
    async def _authorize(self, job: UploadJob) -> JobState:
        await self._tokens.acquire(job, self._bucket, self._abort_event)
        return JobState.AUTHORIZED
    
    async def _store(self, job: UploadJob) -> JobState:
        await self._storage.store(job, self._bucket, job.token)
        # Free disk before any mirroring is requested.
        self._cleanup(job)
        return JobState.STORED
    
    async def _replicate(self, job: UploadJob) -> JobState:
        if self._redundancy <= 0:
            return JobState.DONE
        try:
            await self._replication.replicate(job, self._bucket, self._redundancy)
        except ReplicationError as e:
            job.replication_error = e
            logger.warning(f"[ {job.filename} ] {e}")
            return JobState.DONE
        return JobState.REPLICATED
    
    async def _finish(self, job: UploadJob) -> JobState:
        return JobState.DONE
