"""
Concurrency controller.

Bounds how many files progress through the pipeline at the same time.
A slot is held for a job's whole lifetime, from admission to DONE/ABORTED.
"""
import asyncio
import logging

logger = logging.getLogger('storjpy.upload.concurrency')


class ConcurrencyController:
    """
    Admission gate backed by asyncio.Semaphore.
    
    Waiters are admitted in FIFO order, so files start in discovery order.
    Tracks the number of admitted jobs and the highest value seen.
    """
    
    def __init__(self, limit: int = 1):
        """
        Initialize controller.
        
        Args:
            limit: Maximum number of jobs admitted simultaneously
        """
        if limit < 1:
            raise ValueError("Concurrency limit cannot be less than 1")
        self._limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._active = 0
        self._peak = 0
    
    @property
    def limit(self) -> int:
        return self._limit
    
    @property
    def active(self) -> int:
        return self._active
    
    @property
    def peak(self) -> int:
        return self._peak
    
    async def acquire(self) -> None:
        """Wait for a free slot."""
        await self._semaphore.acquire()
        self._active += 1
        self._peak = max(self._peak, self._active)
        logger.debug(f"Slot acquired ({self._active}/{self._limit} active)")
    
    def release(self) -> None:
        """Free one slot."""
        if self._active == 0:
            raise RuntimeError("release() called more times than acquire()")
        self._active -= 1
        self._semaphore.release()
        logger.debug(f"Slot released ({self._active}/{self._limit} active)")
    
    async def __aenter__(self):
        await self.acquire()
        return self
    
    async def __aexit__(self, exc_type, exc, tb):
        self.release()
