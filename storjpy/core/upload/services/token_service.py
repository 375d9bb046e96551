"""
Authorization stage service.

Obtains a single-use PUSH token for the job, retrying failed requests up to
a fixed cap.
"""
import asyncio
import logging
from typing import Any, Mapping, Optional, Union

from ...exceptions import AuthorizationError, ResourceExhaustionError
from ..models import UploadJob, StorageToken
from ..protocols import StorageClient
from ..retry import RetryStrategy, ImmediateRetryStrategy


class TokenService:
    """
    Requests write tokens from the storage client.
    
    Every failed attempt increments job.token_retries. Once the strategy
    refuses another retry the job fails with AuthorizationError.
    """
    
    OPERATION = 'PUSH'
    
    def __init__(
        self,
        client: StorageClient,
        max_retries: int = 999,
        retry_strategy: Optional[RetryStrategy] = None
    ):
        """
        Initialize token service.
        
        Args:
            client: Storage client
            max_retries: Retries allowed after the first failed attempt
            retry_strategy: Delay policy between attempts (none by default)
        """
        self._client = client
        self._max_retries = max_retries
        self._strategy = retry_strategy or ImmediateRetryStrategy()
        self._logger = logging.getLogger('storjpy.upload.token')
    
    @property
    def max_retries(self) -> int:
        return self._max_retries
    
    async def acquire(
        self,
        job: UploadJob,
        bucket: str,
        abort_event: Optional[asyncio.Event] = None
    ) -> StorageToken:
        """
        Obtain a token for one job.
        
        Args:
            job: Job requesting the token
            bucket: Target bucket
            abort_event: Session abort flag, checked after each failed attempt
            
        Returns:
            Storage token
            
        Raises:
            AuthorizationError: When the retry cap is exhausted
            ResourceExhaustionError: If the session was aborted meanwhile
        """
        while True:
            self._logger.info(
                f"[ {job.filename} ] Creating storage token... (retry: {job.token_retries})"
            )
            try:
                response = await self._client.create_token(bucket, self.OPERATION)
                token = self._to_token(response, bucket)
            except Exception as e:
                if not self._strategy.should_retry(job.token_retries, self._max_retries):
                    self._logger.error(
                        f"[ {job.filename} ] Token request failed after "
                        f"{job.token_retries + 1} attempts: {e}"
                    )
                    raise AuthorizationError(
                        f"Could not create storage token: {e}",
                        filename=job.filename,
                        attempts=job.token_retries + 1
                    ) from e
                if abort_event is not None and abort_event.is_set():
                    raise ResourceExhaustionError(
                        "Session aborted during authorization"
                    ) from e
                job.token_retries += 1
                self._logger.debug(f"[ {job.filename} ] Token request failed: {e}")
                await self._strategy.wait_async(job.token_retries)
                continue
            
            job.token = token
            return token
    
    def _to_token(
        self,
        response: Union[StorageToken, Mapping[str, Any]],
        bucket: str
    ) -> StorageToken:
        if isinstance(response, StorageToken):
            return response
        if isinstance(response, Mapping):
            data = dict(response)
            data.setdefault('bucket', bucket)
            return StorageToken.from_dict(data)
        raise TypeError(f"Unexpected token response: {response!r}")
