"""
Replication stage service.

Requests mirrors for the shards of a stored file. Failures are reported to
the caller as ReplicationError and never undo the upload.
"""
import logging
from typing import Any, List, Mapping, Union

from ...exceptions import ReplicationError
from ..models import UploadJob, ShardReplication
from ..protocols import StorageClient


class ReplicationService:
    """Asks the storage client for additional shard mirrors."""
    
    def __init__(self, client: StorageClient):
        self._client = client
        self._logger = logging.getLogger('storjpy.upload.replication')
    
    async def replicate(
        self,
        job: UploadJob,
        bucket: str,
        mirror_count: int
    ) -> List[ShardReplication]:
        """
        Request mirror_count mirrors per shard of the job's file.
        
        Raises:
            ReplicationError: If the request fails
        """
        if job.file_record is None:
            raise ReplicationError("Job has no stored file", filename=job.filename)
        
        self._logger.info(f"Establishing {mirror_count} mirrors per shard for redundancy")
        try:
            response = await self._client.replicate(bucket, job.file_record.id, mirror_count)
            replicas = [self._to_shard(item) for item in response]
        except Exception as e:
            raise ReplicationError(
                f"Mirroring failed for {job.file_record.id}: {e}",
                filename=job.filename
            ) from e
        
        for shard in replicas:
            self._logger.info(f"Shard {shard.hash} {shard.status} mirroring by {shard.mirrors} nodes")
        job.replicas = replicas
        return replicas
    
    def _to_shard(self, item: Union[ShardReplication, Mapping[str, Any]]) -> ShardReplication:
        if isinstance(item, ShardReplication):
            return item
        return ShardReplication.from_dict(item)
