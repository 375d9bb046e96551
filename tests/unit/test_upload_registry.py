"""Tests for the job registry."""
from pathlib import Path

import pytest

from storjpy.core.exceptions import StorageError
from storjpy.core.upload import JobRegistry, UploadSessionConfig, JobState
from storjpy.core.upload.models import UploadSession


@pytest.fixture
def registry():
    session = UploadSession(
        config=UploadSessionConfig(bucket="b", selectors="x"),
        files=[Path("/data/a.txt"), Path("/data/b.txt")]
    )
    return JobRegistry(session)


class TestJobRegistry:
    """Test suite for JobRegistry."""
    
    def test_create_assigns_ids(self, registry):
        """Test jobs get sequential integer ids."""
        first = registry.create(Path("/data/a.txt"))
        second = registry.create(Path("/data/b.txt"))
        
        assert (first.id, second.id) == (1, 2)
        assert first.filename == "a.txt"
        assert registry.get(2) is second
        assert len(registry) == 2
    
    def test_get_unknown(self, registry):
        """Test unknown ids raise KeyError."""
        with pytest.raises(KeyError):
            registry.get(42)
    
    def test_open_jobs(self, registry):
        """Test terminal jobs are not open."""
        first = registry.create(Path("/data/a.txt"))
        second = registry.create(Path("/data/b.txt"))
        registry.mark_aborted(first, StorageError("x"))
        
        assert registry.open_jobs() == [second]
    
    def test_mark_done_counts(self, registry):
        """Test DONE jobs increment the session counter."""
        job = registry.create(Path("/data/a.txt"))
        for state in (JobState.PREPARED, JobState.ENCRYPTED, JobState.AUTHORIZED, JobState.STORED):
            job.advance(state)
        
        assert registry.mark_done(job) == 1
        assert registry.session.uploaded_count == 1
        assert registry.counts() == {JobState.DONE: 1}
    
    def test_mark_aborted_once(self, registry):
        """Test aborting twice counts once."""
        job = registry.create(Path("/data/a.txt"))
        
        registry.mark_aborted(job, StorageError("x"))
        registry.mark_aborted(job, StorageError("y"))
        
        assert registry.session.aborted_count == 1
