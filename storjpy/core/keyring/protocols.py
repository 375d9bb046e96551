"""
Key ring protocols.

Defines the interface of the store mapping file ids to decryption secrets.
"""
from typing import Protocol, Optional, runtime_checkable

from ..crypto import CipherSecret


@runtime_checkable
class KeyRing(Protocol):
    """
    Protocol for key ring implementations.
    
    Implementations can persist to disk, a keychain, or keep secrets in memory.
    """
    
    def set(self, file_id: str, secret: CipherSecret) -> None:
        """
        Register the decryption secret of a stored file.
        
        Args:
            file_id: Identifier returned by the storage network
            secret: Secret the file was encrypted with
        """
        ...
    
    def get(self, file_id: str) -> Optional[CipherSecret]:
        """Return the secret for a file id, or None."""
        ...
    
    def delete(self, file_id: str) -> None:
        """Forget the secret for a file id."""
        ...
