"""Retry strategies for the authorization stage, using Strategy Pattern."""
import asyncio
from abc import ABC, abstractmethod


class RetryStrategy(ABC):
    """Abstract retry strategy."""
    
    @abstractmethod
    def should_retry(self, retry_count: int, max_retries: int) -> bool:
        """Determines if another attempt is allowed."""
        pass
    
    @abstractmethod
    async def wait_async(self, retry_count: int):
        """Waits before retry."""
        pass


class ImmediateRetryStrategy(RetryStrategy):
    """Retries right away, without delay."""
    
    def should_retry(self, retry_count: int, max_retries: int) -> bool:
        return retry_count < max_retries
    
    async def wait_async(self, retry_count: int):
        # Yield so sibling jobs and the watchdog keep running.
        await asyncio.sleep(0)


class ExponentialBackoffStrategy(RetryStrategy):
    """Exponential backoff retry strategy."""
    
    def __init__(self, base_delay: float = 0.25, max_delay: float = 16.0, exponential_base: float = 2.0):
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
    
    def should_retry(self, retry_count: int, max_retries: int) -> bool:
        return retry_count < max_retries
    
    def calculate_delay(self, retry_count: int) -> float:
        """Calculate delay for given retry number."""
        delay = self.base_delay * (self.exponential_base ** retry_count)
        return min(delay, self.max_delay)
    
    async def wait_async(self, retry_count: int):
        """Waits with exponential backoff (async)."""
        await asyncio.sleep(self.calculate_delay(retry_count))
