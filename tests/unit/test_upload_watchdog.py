"""Tests for the resource watchdog and memory signal."""
import asyncio
from unittest.mock import Mock, patch

import pytest

from storjpy.core.exceptions import ResourceExhaustionError
from storjpy.core.upload import ResourceWatchdog, MemorySignal, WatchdogConfig
from storjpy.core.upload.watchdog import available_memory


class TestResourceWatchdog:
    """Test suite for ResourceWatchdog."""
    
    def test_start_and_stop(self, resource_signal):
        """Test the watchdog starts the signal with its config and detaches on stop."""
        watchdog = ResourceWatchdog(
            resource_signal,
            WatchdogConfig(poll_interval_ms=100, low_threshold_bytes=500)
        )
        
        watchdog.start(Mock())
        
        assert watchdog.running
        assert resource_signal.started_with == (100, 500)
        assert resource_signal.listener_count('low_resource') == 1
        
        watchdog.stop()
        
        assert not watchdog.running
        assert resource_signal.stop_calls == 1
        assert resource_signal.listener_count('low_resource') == 0
    
    def test_fires_once(self, resource_signal):
        """Test repeated signals produce a single abort."""
        callback = Mock()
        watchdog = ResourceWatchdog(resource_signal)
        watchdog.start(callback)
        
        resource_signal.fire(100)
        resource_signal.fire(50)
        
        callback.assert_called_once()
        error = callback.call_args[0][0]
        assert isinstance(error, ResourceExhaustionError)
        assert error.available == 100
        assert watchdog.fired
    
    def test_stop_idempotent(self, resource_signal):
        """Test stop can be called repeatedly."""
        watchdog = ResourceWatchdog(resource_signal)
        watchdog.start(Mock())
        
        watchdog.stop()
        watchdog.stop()
        
        assert resource_signal.stop_calls == 1
    
    def test_disabled(self, resource_signal):
        """Test a disabled watchdog never starts its signal."""
        watchdog = ResourceWatchdog(resource_signal, WatchdogConfig(enabled=False))
        
        watchdog.start(Mock())
        watchdog.stop()
        
        assert resource_signal.start_calls == 0
        assert resource_signal.stop_calls == 0
    
    def test_without_signal(self):
        """Test a watchdog without a signal is inert."""
        watchdog = ResourceWatchdog(None)
        
        watchdog.start(Mock())
        
        assert not watchdog.running


class TestMemorySignal:
    """Test suite for MemorySignal."""
    
    @pytest.mark.asyncio
    async def test_emits_below_threshold(self):
        """Test low memory emits the available byte count."""
        received = asyncio.Event()
        values = []
        signal = MemorySignal(probe=lambda: 1000)
        signal.on('low_resource', lambda available: (values.append(available), received.set()))
        
        signal.start(poll_interval_ms=10, low_threshold_bytes=5000)
        await asyncio.wait_for(received.wait(), 1.0)
        signal.stop()
        
        assert values[0] == 1000
        assert not signal.running
    
    @pytest.mark.asyncio
    async def test_silent_above_threshold(self):
        """Test enough memory emits nothing."""
        probe = Mock(return_value=10_000)
        callback = Mock()
        signal = MemorySignal(probe=probe)
        signal.on('low_resource', callback)
        
        signal.start(poll_interval_ms=5, low_threshold_bytes=5000)
        await asyncio.sleep(0.05)
        signal.stop()
        
        assert probe.call_count >= 2
        callback.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_poller(self):
        """Test a second start does not spawn another poller."""
        signal = MemorySignal(probe=lambda: 10_000)
        
        signal.start(10, 1)
        task = signal._task
        signal.start(10, 1)
        
        assert signal._task is task
        signal.stop()
    
    def test_available_memory_uses_psutil(self):
        """Test the default probe reads psutil."""
        with patch('storjpy.core.upload.watchdog.psutil.virtual_memory') as virtual_memory:
            virtual_memory.return_value = Mock(available=12345)
            
            assert available_memory() == 12345
