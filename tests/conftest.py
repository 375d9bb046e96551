"""Pytest fixtures for StorjPy tests."""
import asyncio
from pathlib import Path
from typing import List, Optional, Set

import pytest

from storjpy.core.events import EventEmitter
from storjpy.core.keyring import MemoryKeyRing


class FakeStorageClient:
    """
    In-memory stand-in for the bridge client.
    
    The first token_failures token requests fail. Files whose name is in
    fail_store_for are rejected. When store_gate is set, store_file blocks
    until the gate opens.
    """
    
    def __init__(
        self,
        token_failures: int = 0,
        fail_store_for: Optional[Set[str]] = None,
        replicate_error: Optional[Exception] = None,
        store_delay: float = 0.0
    ):
        self.token_failures = token_failures
        self.fail_store_for = fail_store_for or set()
        self.replicate_error = replicate_error
        self.store_delay = store_delay
        self.store_gate: Optional[asyncio.Event] = None
        
        self.token_calls = 0
        self.store_calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.stored: List[dict] = []
        self.replications: List[tuple] = []
    
    async def create_token(self, bucket, operation):
        self.token_calls += 1
        if self.token_failures > 0:
            self.token_failures -= 1
            raise ConnectionError("bridge unavailable")
        return {'token': f"token-{self.token_calls}", 'bucket': bucket, 'operation': operation}
    
    async def store_file(self, bucket, token, file_path):
        self.store_calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.store_gate is not None:
                await self.store_gate.wait()
            if self.store_delay:
                await asyncio.sleep(self.store_delay)
            
            path = Path(file_path)
            name = path.name[:-len('.crypt')]
            if name in self.fail_store_for:
                raise ConnectionError(f"transfer of {name} rejected")
            
            data = path.read_bytes()
            record = {
                'id': f"file-{len(self.stored) + 1}",
                'filename': name,
                'size': len(data),
                'mimetype': 'application/octet-stream',
                'token': token,
                'ciphertext': data,
            }
            self.stored.append(record)
            return record
        finally:
            self.in_flight -= 1
    
    async def replicate(self, bucket, file_id, mirror_count):
        self.replications.append((bucket, file_id, mirror_count))
        if self.replicate_error is not None:
            raise self.replicate_error
        return [
            {'hash': f"{file_id}-shard-0", 'status': 'started', 'mirrors': mirror_count},
            {'hash': f"{file_id}-shard-1", 'status': 'started', 'mirrors': mirror_count},
        ]


class FakeResourceSignal(EventEmitter):
    """Resource signal fired manually by the test."""
    
    def __init__(self):
        super().__init__()
        self.started_with = None
        self.start_calls = 0
        self.stop_calls = 0
    
    def start(self, poll_interval_ms, low_threshold_bytes):
        self.start_calls += 1
        self.started_with = (poll_interval_ms, low_threshold_bytes)
    
    def stop(self):
        self.stop_calls += 1
    
    def fire(self, available=1024):
        self.emit('low_resource', available)


async def wait_until(predicate, timeout=2.0):
    """Poll predicate on the event loop until it holds."""
    async def _wait():
        while not predicate():
            await asyncio.sleep(0.005)
    await asyncio.wait_for(_wait(), timeout)


@pytest.fixture
def client():
    """Returns a fake storage client."""
    return FakeStorageClient()


@pytest.fixture
def keyring():
    """Returns an empty in-memory key ring."""
    return MemoryKeyRing()


@pytest.fixture
def resource_signal():
    """Returns a manually fired resource signal."""
    return FakeResourceSignal()


@pytest.fixture
def workspace_dir(tmp_path):
    """Directory holding job workspaces, checked for leftovers."""
    path = tmp_path / "workspaces"
    path.mkdir()
    return path


@pytest.fixture
def source_dir(tmp_path):
    """Directory with three readable source files."""
    path = tmp_path / "source"
    path.mkdir()
    (path / "a.txt").write_bytes(b"alpha " * 100)
    (path / "b.txt").write_bytes(b"bravo " * 2000)
    (path / "c.txt").write_bytes(b"charlie")
    return path


@pytest.fixture
def make_client():
    """Returns the fake client class for tests needing custom behavior."""
    return FakeStorageClient


@pytest.fixture
def wait_for():
    """Returns the wait_until helper."""
    return wait_until
