"""
Job registry.

Indexed collection of upload jobs owned by the session coordinator.
Jobs are addressed by integer id; nothing else holds a job across stages.
"""
import itertools
from collections import Counter
from pathlib import Path
from typing import Dict, List, Iterator

from .models import UploadJob, UploadSession, JobState


class JobRegistry:
    """Arena of upload jobs for one session."""
    
    def __init__(self, session: UploadSession):
        self._session = session
        self._jobs: Dict[int, UploadJob] = {}
        self._ids = itertools.count(1)
    
    @property
    def session(self) -> UploadSession:
        return self._session
    
    def create(self, source_path: Path) -> UploadJob:
        """Register a new job for a discovered file."""
        job = UploadJob(
            id=next(self._ids),
            source_path=source_path,
            filename=source_path.name
        )
        self._jobs[job.id] = job
        return job
    
    def get(self, job_id: int) -> UploadJob:
        """
        Look up a job.
        
        Raises:
            KeyError: If no job has this id
        """
        return self._jobs[job_id]
    
    def jobs(self) -> List[UploadJob]:
        """All jobs in creation order."""
        return list(self._jobs.values())
    
    def open_jobs(self) -> List[UploadJob]:
        """Jobs not yet DONE or ABORTED."""
        return [job for job in self._jobs.values() if job.is_open]
    
    def counts(self) -> Dict[JobState, int]:
        """Number of jobs per state."""
        return dict(Counter(job.state for job in self._jobs.values()))
    
    def mark_done(self, job: UploadJob) -> int:
        """
        Move a job to DONE and count it on the session.
        
        Returns:
            Session uploaded count after the increment
        """
        job.advance(JobState.DONE)
        return self._session.record_done()
    
    def mark_aborted(self, job: UploadJob, error) -> None:
        """Move a job to ABORTED and count it on the session."""
        if job.state.is_terminal:
            return
        job.abort(error)
        self._session.record_aborted()
    
    def __len__(self) -> int:
        return len(self._jobs)
    
    def __iter__(self) -> Iterator[UploadJob]:
        return iter(self.jobs())
