"""
Per-file cipher secret.

A fresh secret is generated for every upload job; it becomes the decryption
key of the stored file once the network has accepted it.
"""
from dataclasses import dataclass
from typing import Dict, Any

from Crypto.Random import get_random_bytes


@dataclass(frozen=True)
class CipherSecret:
    """
    Symmetric key material for one file.
    
    Attributes:
        key: 32-byte AES-256 key
        iv: 16-byte initial counter block
    """
    key: bytes
    iv: bytes
    
    KEY_SIZE = 32
    IV_SIZE = 16
    
    def __post_init__(self):
        if len(self.key) != self.KEY_SIZE:
            raise ValueError(f"Key must be {self.KEY_SIZE} bytes")
        if len(self.iv) != self.IV_SIZE:
            raise ValueError(f"IV must be {self.IV_SIZE} bytes")
    
    @classmethod
    def generate(cls) -> 'CipherSecret':
        """Generate fresh random key material."""
        return cls(key=get_random_bytes(cls.KEY_SIZE), iv=get_random_bytes(cls.IV_SIZE))
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to hex-encoded dict for key ring storage."""
        return {'key': self.key.hex(), 'iv': self.iv.hex()}
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CipherSecret':
        """Create from hex-encoded dict."""
        return cls(key=bytes.fromhex(data['key']), iv=bytes.fromhex(data['iv']))
    
    def __repr__(self) -> str:
        return "CipherSecret(key=<hidden>, iv=<hidden>)"
