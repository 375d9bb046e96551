"""Key ring storage for per-file decryption secrets."""
from .protocols import KeyRing
from .memory_keyring import MemoryKeyRing

__all__ = ['KeyRing', 'MemoryKeyRing']
