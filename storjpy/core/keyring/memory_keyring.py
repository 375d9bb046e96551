"""
In-memory key ring implementation.

Provides non-persistent secret storage for testing and in-process use.
"""
from typing import Dict, Optional, Iterator

from ..crypto import CipherSecret
from .protocols import KeyRing


class MemoryKeyRing(KeyRing):
    """
    In-memory key ring.
    
    Secrets are lost when the object is destroyed.
    
    Example:
        >>> keyring = MemoryKeyRing()
        >>> keyring.set('file-id', CipherSecret.generate())
        >>> 'file-id' in keyring
        True
    """
    
    def __init__(self):
        self._secrets: Dict[str, CipherSecret] = {}
    
    def set(self, file_id: str, secret: CipherSecret) -> None:
        if not file_id:
            raise ValueError("File id cannot be empty")
        self._secrets[file_id] = secret
    
    def get(self, file_id: str) -> Optional[CipherSecret]:
        return self._secrets.get(file_id)
    
    def delete(self, file_id: str) -> None:
        self._secrets.pop(file_id, None)
    
    def __contains__(self, file_id: object) -> bool:
        return file_id in self._secrets
    
    def __len__(self) -> int:
        return len(self._secrets)
    
    def __iter__(self) -> Iterator[str]:
        return iter(self._secrets)
