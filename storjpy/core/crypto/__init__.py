"""Crypto module - per-file secrets and stream ciphers."""
from .secret import CipherSecret
from .stream import AesCtrCipherFactory, AesCtrEncryptStream, AesCtrDecryptStream

__all__ = [
    'CipherSecret',
    'AesCtrCipherFactory',
    'AesCtrEncryptStream',
    'AesCtrDecryptStream',
]
