"""
Protocol definitions for upload module.

Defines the collaborators the pipeline consumes as abstract capabilities.
The network client, key ring and resource signal are supplied by the caller.
"""
from typing import Protocol, Any, Callable, List, Union, Mapping
from pathlib import Path

from ..crypto import CipherSecret
from ..keyring import KeyRing
from .models import StorageToken, FileRecord, ShardReplication


class StorageClient(Protocol):
    """Protocol for the storage bridge client."""
    
    async def create_token(
        self,
        bucket: str,
        operation: str
    ) -> Union[StorageToken, Mapping[str, Any]]:
        """
        Request a single-use token for the bucket.
        
        Args:
            bucket: Bucket identifier
            operation: 'PUSH' for uploads
            
        Returns:
            Token object or its dict form
        """
        ...
    
    async def store_file(
        self,
        bucket: str,
        token: str,
        file_path: Path
    ) -> Union[FileRecord, Mapping[str, Any]]:
        """
        Transfer an encrypted file to the network.
        
        Args:
            bucket: Bucket identifier
            token: Token string from create_token
            file_path: Path of the ciphertext file
            
        Returns:
            Stored file record or its dict form
        """
        ...
    
    async def replicate(
        self,
        bucket: str,
        file_id: str,
        mirror_count: int
    ) -> List[Union[ShardReplication, Mapping[str, Any]]]:
        """
        Request mirrors for every shard of a stored file.
        
        Returns:
            Replication status per shard
        """
        ...


class EncryptStream(Protocol):
    """Protocol for an incremental encrypt transform."""
    
    def encrypt(self, chunk: bytes) -> bytes:
        ...


class CipherStreamFactory(Protocol):
    """Protocol for cipher stream factories."""
    
    def create_encryptor(self, secret: CipherSecret) -> EncryptStream:
        """Create an encrypt transform keyed by the secret."""
        ...


class ResourceSignal(Protocol):
    """
    Protocol for free-resource signal sources.
    
    Implementations emit 'low_resource' once the watched resource drops
    below the threshold.
    """
    
    def start(self, poll_interval_ms: int, low_threshold_bytes: int) -> None:
        ...
    
    def stop(self) -> None:
        ...
    
    def on(self, event: str, callback: Callable) -> Any:
        ...
    
    def off(self, event: str, callback: Callable = None) -> Any:
        ...


__all__ = [
    'StorageClient',
    'EncryptStream',
    'CipherStreamFactory',
    'ResourceSignal',
    'KeyRing',
]
