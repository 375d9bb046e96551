"""Tests for upload models."""
import pytest
from pathlib import Path

from storjpy.core.exceptions import (
    InvalidConcurrencyError,
    InvalidRedundancyError,
    InvalidChunkSizeError,
    ConfigurationError,
    StorageError,
)
from storjpy.core.upload.models import (
    UploadSessionConfig,
    WatchdogConfig,
    JobState,
    UploadJob,
    UploadSession,
    UploadSummary,
    FileRecord,
    StorageToken,
    ShardReplication,
)


class TestUploadSessionConfig:
    """Test suite for UploadSessionConfig."""
    
    def test_defaults(self):
        """Test default values."""
        config = UploadSessionConfig(bucket="b", selectors="*.txt")
        
        assert config.file_concurrency == 1
        assert config.redundancy == 0
        assert config.max_token_retries == 999
        assert config.selectors == ["*.txt"]
        assert config.watchdog == WatchdogConfig()
        assert config.watchdog.poll_interval_ms == 3000
        assert config.watchdog.low_threshold_bytes == 8_000_000
    
    def test_selectors_normalized(self):
        """Test selector tuples and paths become lists."""
        config = UploadSessionConfig(bucket="b", selectors=(Path("a"), "b"))
        
        assert config.selectors == [Path("a"), "b"]
    
    @pytest.mark.parametrize("redundancy", [0, 6, 12])
    def test_valid_redundancy(self, redundancy):
        """Test boundary redundancy values pass."""
        UploadSessionConfig(bucket="b", selectors="x", redundancy=redundancy).validate()
    
    @pytest.mark.parametrize("redundancy", [-1, 13])
    def test_invalid_redundancy(self, redundancy):
        """Test redundancy outside [0, 12] fails."""
        config = UploadSessionConfig(bucket="b", selectors="x", redundancy=redundancy)
        
        with pytest.raises(InvalidRedundancyError) as exc_info:
            config.validate()
        
        assert exc_info.value.value == redundancy
    
    def test_invalid_concurrency(self):
        """Test file concurrency of 0 fails."""
        with pytest.raises(InvalidConcurrencyError):
            UploadSessionConfig(bucket="b", selectors="x", file_concurrency=0).validate()
    
    def test_invalid_chunk_size(self):
        """Test non-positive chunk size fails validation."""
        config = UploadSessionConfig(bucket="b", selectors="x", chunk_size=0)
        
        with pytest.raises(InvalidChunkSizeError) as exc_info:
            config.validate()
        
        assert exc_info.value.value == 0
        assert isinstance(exc_info.value, ConfigurationError)


class TestJobState:
    """Test suite for JobState transitions."""
    
    def test_terminal_states(self):
        """Test only DONE and ABORTED are terminal."""
        terminal = {state for state in JobState if state.is_terminal}
        
        assert terminal == {JobState.DONE, JobState.ABORTED}
    
    def test_forward_transitions(self):
        """Test legal forward transitions."""
        assert JobState.ADMITTED.can_advance_to(JobState.PREPARED)
        assert JobState.STORED.can_advance_to(JobState.REPLICATED)
        assert JobState.STORED.can_advance_to(JobState.DONE)
    
    def test_skipping_stage_not_allowed(self):
        """Test stages cannot be skipped."""
        assert not JobState.PREPARED.can_advance_to(JobState.AUTHORIZED)
        assert not JobState.ENCRYPTED.can_advance_to(JobState.DONE)
    
    def test_abort_from_any_open_state(self):
        """Test ABORTED is reachable from every non-terminal state."""
        for state in JobState:
            assert state.can_advance_to(JobState.ABORTED) == (not state.is_terminal)


class TestUploadJob:
    """Test suite for UploadJob."""
    
    @pytest.fixture
    def job(self):
        return UploadJob(id=1, source_path=Path("/tmp/a.txt"), filename="a.txt")
    
    def test_initial_state(self, job):
        """Test jobs start admitted and open."""
        assert job.state is JobState.ADMITTED
        assert job.is_open
        assert job.history == [JobState.ADMITTED]
    
    def test_advance(self, job):
        """Test advance records history."""
        job.advance(JobState.PREPARED)
        
        assert job.state is JobState.PREPARED
        assert job.history == [JobState.ADMITTED, JobState.PREPARED]
    
    def test_illegal_advance(self, job):
        """Test an illegal transition raises."""
        with pytest.raises(ValueError, match="Illegal transition"):
            job.advance(JobState.STORED)
    
    def test_abort(self, job):
        """Test abort records the error."""
        error = StorageError("rejected", filename="a.txt")
        job.abort(error)
        
        assert job.state is JobState.ABORTED
        assert job.error is error
        assert not job.is_open
    
    def test_abort_terminal_is_noop(self, job):
        """Test aborting a finished job changes nothing."""
        job.abort(StorageError("first"))
        first = job.error
        job.abort(StorageError("second"))
        
        assert job.error is first
        assert job.history.count(JobState.ABORTED) == 1


class TestUploadSession:
    """Test suite for UploadSession counters."""
    
    def test_record_done_bounded(self):
        """Test uploaded count never exceeds discovered count."""
        session = UploadSession(
            config=UploadSessionConfig(bucket="b", selectors="x"),
            files=[Path("/a")]
        )
        
        assert session.record_done() == 1
        assert session.is_complete
        with pytest.raises(ValueError):
            session.record_done()
    
    def test_empty_session_not_complete(self):
        """Test a session without files is never complete."""
        session = UploadSession(config=UploadSessionConfig(bucket="b", selectors="x"))
        
        assert not session.is_complete


class TestRecords:
    """Test suite for bridge response records."""
    
    def test_file_record_from_dict(self):
        """Test parsing a stored file response."""
        record = FileRecord.from_dict(
            {'id': 'f1', 'filename': 'a.txt', 'size': '42', 'mimetype': 'text/plain'}
        )
        
        assert record == FileRecord(id='f1', filename='a.txt', size=42, mimetype='text/plain')
    
    def test_token_from_dict(self):
        """Test parsing a token response."""
        token = StorageToken.from_dict({'token': 'abc', 'bucket': 'b1'})
        
        assert token.token == 'abc'
        assert token.operation == 'PUSH'
    
    def test_shard_from_dict(self):
        """Test parsing a shard replication status."""
        shard = ShardReplication.from_dict({'hash': 'h', 'status': 'started', 'mirrors': 3})
        
        assert shard.mirrors == 3


class TestUploadSummary:
    """Test suite for UploadSummary."""
    
    def test_success(self):
        """Test a clean summary is successful."""
        summary = UploadSummary(discovered_count=2, uploaded_count=2)
        
        assert summary.success
        summary.raise_for_error()
    
    def test_aborted_jobs_not_success(self):
        """Test aborted jobs make the summary unsuccessful without an error."""
        summary = UploadSummary(discovered_count=2, uploaded_count=1, aborted_count=1)
        
        assert not summary.success
        assert summary.error is None
