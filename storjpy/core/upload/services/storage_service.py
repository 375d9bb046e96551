"""
Storage stage service.

Transfers the ciphertext under the acquired token and registers the file's
secret in the key ring once the network returns a durable id.
"""
import logging
from typing import Any, Mapping, Union

from ...exceptions import StorageError
from ...keyring import KeyRing
from ..models import UploadJob, StorageToken, FileRecord
from ..protocols import StorageClient


class StorageService:
    """
    Stores encrypted files in a bucket.
    
    No retry here: a failed transfer aborts the job and the file must be
    resubmitted.
    """
    
    def __init__(self, client: StorageClient, keyring: KeyRing):
        """
        Initialize storage service.
        
        Args:
            client: Storage client
            keyring: Key ring receiving secrets of stored files
        """
        self._client = client
        self._keyring = keyring
        self._logger = logging.getLogger('storjpy.upload.storage')
    
    async def store(self, job: UploadJob, bucket: str, token: StorageToken) -> FileRecord:
        """
        Store the job's ciphertext.
        
        Args:
            job: Encrypted job
            bucket: Target bucket
            token: Write token for this job
            
        Returns:
            Record of the stored file
            
        Raises:
            StorageError: On transport failure or server rejection
        """
        if job.workspace is None or job.secret is None:
            raise StorageError("Job is not encrypted", filename=job.filename)
        
        self._logger.info(f"[ {job.filename} ] Storing file, hang tight!")
        try:
            response = await self._client.store_file(
                bucket, token.token, job.workspace.encrypted_path
            )
            record = self._to_record(response)
        except Exception as e:
            self._logger.warning(f"[ {job.filename} ] Error occurred. Triggering cleanup...")
            raise StorageError(f"Could not store file: {e}", filename=job.filename) from e
        
        try:
            self._keyring.set(record.id, job.secret)
        except Exception as e:
            raise StorageError(
                f"Stored as {record.id} but the key could not be saved: {e}",
                filename=job.filename
            ) from e
        
        job.file_record = record
        self._logger.info(f"[ {job.filename} ] Encryption key saved to keyring.")
        self._logger.info(f"[ {job.filename} ] File successfully stored in bucket.")
        self._logger.info(
            f"Name: {record.filename}, Type: {record.mimetype}, "
            f"Size: {record.size} bytes, ID: {record.id}"
        )
        return record
    
    def _to_record(self, response: Union[FileRecord, Mapping[str, Any]]) -> FileRecord:
        if isinstance(response, FileRecord):
            return response
        if isinstance(response, Mapping):
            return FileRecord.from_dict(response)
        raise TypeError(f"Unexpected store response: {response!r}")
