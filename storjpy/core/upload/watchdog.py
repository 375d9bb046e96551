"""
Resource watchdog.

Listens to a free-resource signal and raises a single session-wide abort
when the signal reports pressure. MemorySignal is the default signal source,
polling free memory through psutil.
"""
import asyncio
import logging
from typing import Callable, Optional

import psutil

from ..events import EventEmitter
from ..exceptions import ResourceExhaustionError
from .models import WatchdogConfig
from .protocols import ResourceSignal

logger = logging.getLogger('storjpy.upload.watchdog')

LOW_RESOURCE = 'low_resource'


def available_memory() -> int:
    """Returns free memory in bytes."""
    return psutil.virtual_memory().available


class MemorySignal(EventEmitter):
    """
    Polls free memory on a fixed interval.
    
    Emits 'low_resource' with the available byte count on every poll that
    finds memory under the threshold. Must be started from a running loop.
    """
    
    def __init__(self, probe: Callable[[], int] = available_memory):
        """
        Initialize memory signal.
        
        Args:
            probe: Returns the currently available bytes
        """
        super().__init__()
        self._probe = probe
        self._task: Optional[asyncio.Task] = None
    
    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
    
    def start(self, poll_interval_ms: int, low_threshold_bytes: int) -> None:
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._poll(poll_interval_ms / 1000, low_threshold_bytes))
    
    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
    
    async def _poll(self, interval: float, threshold: int) -> None:
        while True:
            available = self._probe()
            if available < threshold:
                logger.debug(f"Free memory {available} below threshold {threshold}")
                self.emit(LOW_RESOURCE, available)
            await asyncio.sleep(interval)


class ResourceWatchdog:
    """
    Turns a resource signal into one session abort.
    
    Repeated signals after the first are ignored. stop() is safe to call
    any number of times and always detaches from the signal.
    """
    
    def __init__(self, signal: Optional[ResourceSignal], config: Optional[WatchdogConfig] = None):
        self._signal = signal
        self._config = config or WatchdogConfig()
        self._callback: Optional[Callable[[ResourceExhaustionError], None]] = None
        self._running = False
        self._fired = False
    
    @property
    def running(self) -> bool:
        return self._running
    
    @property
    def fired(self) -> bool:
        return self._fired
    
    def start(self, on_exhausted: Callable[[ResourceExhaustionError], None]) -> None:
        """
        Start watching.
        
        Args:
            on_exhausted: Called once with the abort error
        """
        if self._running or self._signal is None or not self._config.enabled:
            return
        self._callback = on_exhausted
        self._signal.on(LOW_RESOURCE, self._handle)
        self._signal.start(self._config.poll_interval_ms, self._config.low_threshold_bytes)
        self._running = True
        logger.debug(
            f"Watchdog started (interval={self._config.poll_interval_ms}ms, "
            f"threshold={self._config.low_threshold_bytes} bytes)"
        )
    
    def stop(self) -> None:
        """Stop watching."""
        if not self._running:
            return
        self._running = False
        self._signal.stop()
        self._signal.off(LOW_RESOURCE, self._handle)
        logger.debug("Watchdog stopped")
    
    def _handle(self, available: Optional[int] = None) -> None:
        if self._fired or not self._running:
            return
        self._fired = True
        logger.error(f"Free memory too low ({available} bytes available), aborting session")
        self._callback(ResourceExhaustionError(available=available))
