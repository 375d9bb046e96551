"""
Encryption stage service.

Pipes a file's plaintext through a cipher keyed by a fresh per-file secret,
writing the ciphertext into the job's workspace.
"""
import asyncio
import logging
from typing import Optional

import aiofiles

from ...crypto import CipherSecret, AesCtrCipherFactory
from ...exceptions import WorkspaceError, ResourceExhaustionError
from ..models import UploadJob
from ..protocols import CipherStreamFactory


class EncryptionService:
    """
    Encrypts source files into their workspace.
    
    Uses aiofiles for non-blocking I/O. Reads and writes one chunk at a time
    so memory use does not depend on file size.
    """
    
    DEFAULT_CHUNK_SIZE = 64 * 1024
    
    def __init__(
        self,
        cipher_factory: Optional[CipherStreamFactory] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ):
        """
        Initialize encryption service.
        
        Args:
            cipher_factory: Factory for encrypt transforms (AES-256-CTR if None)
            chunk_size: Bytes read per step
        """
        self._cipher_factory = cipher_factory or AesCtrCipherFactory()
        self._chunk_size = chunk_size
        self._logger = logging.getLogger('storjpy.upload.encryption')
    
    async def encrypt(
        self,
        job: UploadJob,
        abort_event: Optional[asyncio.Event] = None
    ) -> CipherSecret:
        """
        Encrypt the job's source file.
        
        The abort flag is observed after each chunk write completes.
        
        Args:
            job: Job with an allocated workspace
            abort_event: Session abort flag
            
        Returns:
            Secret the ciphertext was produced with
            
        Raises:
            WorkspaceError: On local I/O or cipher failure
            ResourceExhaustionError: If the session was aborted meanwhile
        """
        if job.workspace is None:
            raise WorkspaceError("No workspace allocated", filename=job.filename)
        
        job.secret = CipherSecret.generate()
        try:
            encryptor = self._cipher_factory.create_encryptor(job.secret)
        except Exception as e:
            self._logger.error(f"[ {job.filename} ] Cipher setup failed: {e}")
            raise WorkspaceError(f"Cipher setup failed: {e}", filename=job.filename) from e
        written = 0
        
        self._logger.info(f'Encrypting file "{job.source_path}"')
        try:
            async with aiofiles.open(job.source_path, 'rb') as src:
                async with aiofiles.open(job.workspace.encrypted_path, 'wb') as dst:
                    while True:
                        chunk = await src.read(self._chunk_size)
                        if not chunk:
                            break
                        await dst.write(self._transform(job, encryptor, chunk))
                        written += len(chunk)
                        if abort_event is not None and abort_event.is_set():
                            raise ResourceExhaustionError(
                                "Session aborted during encryption"
                            )
        except OSError as e:
            self._logger.error(f"[ {job.filename} ] Encryption failed: {e}")
            raise WorkspaceError(f"Encryption failed: {e}", filename=job.filename) from e
        
        self._logger.info(f"[ {job.filename} ] Encryption complete ({written} bytes)")
        return job.secret
    
    def _transform(self, job: UploadJob, encryptor, chunk: bytes) -> bytes:
        try:
            return encryptor.encrypt(chunk)
        except Exception as e:
            self._logger.error(f"[ {job.filename} ] Cipher failed: {e}")
            raise WorkspaceError(f"Cipher failed: {e}", filename=job.filename) from e
