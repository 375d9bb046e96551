"""
Cipher stream factory.

Wraps pycryptodome's AES-CTR so a file can be piped through it chunk by chunk.
"""
from Crypto.Cipher import AES

from .secret import CipherSecret


class AesCtrEncryptStream:
    """
    Incremental AES-256-CTR transform.
    
    CTR keystream position advances with every call, so chunks must be fed
    in file order.
    """
    
    def __init__(self, secret: CipherSecret):
        self._cipher = AES.new(
            secret.key,
            AES.MODE_CTR,
            nonce=b'',
            initial_value=secret.iv
        )
        self.bytes_processed = 0
    
    def encrypt(self, chunk: bytes) -> bytes:
        """Encrypt the next chunk of plaintext."""
        self.bytes_processed += len(chunk)
        return self._cipher.encrypt(chunk)


class AesCtrDecryptStream:
    """Inverse of AesCtrEncryptStream, used to verify stored ciphertext."""
    
    def __init__(self, secret: CipherSecret):
        self._cipher = AES.new(
            secret.key,
            AES.MODE_CTR,
            nonce=b'',
            initial_value=secret.iv
        )
    
    def decrypt(self, chunk: bytes) -> bytes:
        """Decrypt the next chunk of ciphertext."""
        return self._cipher.decrypt(chunk)


class AesCtrCipherFactory:
    """Default cipher stream factory used by the encryption stage."""
    
    def create_encryptor(self, secret: CipherSecret) -> AesCtrEncryptStream:
        """Create an encrypt transform keyed by the given secret."""
        return AesCtrEncryptStream(secret)
    
    def create_decryptor(self, secret: CipherSecret) -> AesCtrDecryptStream:
        """Create a decrypt transform keyed by the given secret."""
        return AesCtrDecryptStream(secret)
