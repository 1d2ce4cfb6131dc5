"""
Random Quotes - Lock Management
Named locks with acquisition tracking and statistics

Saves for one widget must not interleave (validate, ingest, and replace are
one logical unit). Each widget gets its own reentrant lock, created the first
time it is asked for, so saves for different widgets never wait on each other.
"""

import threading
import time
from datetime import datetime
from typing import Dict, Optional, Any
from dataclasses import dataclass
from contextlib import contextmanager
from collections import defaultdict

from core.logger import log_section, log_subsection
from core.widget import WidgetInstanceId


@dataclass
class LockStats:
    """Statistics for a single lock."""
    acquisitions: int = 0
    contentions: int = 0  # Times lock was already held
    timeouts: int = 0
    total_wait_time: float = 0.0
    total_hold_time: float = 0.0
    max_wait_time: float = 0.0
    max_hold_time: float = 0.0
    last_acquired: Optional[datetime] = None
    last_released: Optional[datetime] = None


class LockManager:
    """
    Manages named locks with monitoring and statistics.

    Provides thread-safe access to shared resources with
    detailed tracking for debugging.
    """

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._stats: Dict[str, LockStats] = defaultdict(LockStats)
        self._meta_lock = threading.Lock()  # Protects the dictionaries
        self._active_holders: Dict[str, Optional[int]] = {}  # lock_name -> thread_id
        self._waiters: Dict[str, int] = defaultdict(int)

    def has_lock(self, name: str) -> bool:
        with self._meta_lock:
            return name in self._locks

    @contextmanager
    def acquire(self, lock_name: str, timeout: Optional[float] = None, create: bool = False):
        """
        Acquire a named lock with optional timeout.

        Args:
            lock_name: Name of the lock to acquire
            timeout: Optional timeout in seconds
            create: Create the lock if it does not exist yet

        Yields:
            None (just provides context management)

        Raises:
            TimeoutError: If timeout expires before lock acquired
            KeyError: If lock_name doesn't exist and create is False
        """
        thread_id = threading.current_thread().ident
        start_wait = time.monotonic()

        # Registering as a waiter under the same lookup keeps discard_lock()
        # from dropping a lock someone is about to block on
        with self._meta_lock:
            if lock_name not in self._locks:
                if not create:
                    raise KeyError(f"Unknown lock: {lock_name}")
                self._locks[lock_name] = threading.RLock()
                self._stats[lock_name] = LockStats()
            lock = self._locks[lock_name]
            self._waiters[lock_name] += 1
            current_holder = self._active_holders.get(lock_name)
            if current_holder is not None and current_holder != thread_id:
                self._stats[lock_name].contentions += 1

        if timeout is not None:
            acquired = lock.acquire(timeout=timeout)
            if not acquired:
                with self._meta_lock:
                    self._waiters[lock_name] -= 1
                    self._stats[lock_name].timeouts += 1
                raise TimeoutError(f"Timeout waiting for lock: {lock_name}")
        else:
            lock.acquire()

        acquire_time = time.monotonic()
        wait_time = acquire_time - start_wait

        with self._meta_lock:
            self._waiters[lock_name] -= 1
            stats = self._stats[lock_name]
            stats.acquisitions += 1
            stats.total_wait_time += wait_time
            stats.max_wait_time = max(stats.max_wait_time, wait_time)
            stats.last_acquired = datetime.now()
            previous_holder = self._active_holders.get(lock_name)
            self._active_holders[lock_name] = thread_id

        try:
            yield
        finally:
            hold_time = time.monotonic() - acquire_time

            with self._meta_lock:
                stats = self._stats[lock_name]
                stats.total_hold_time += hold_time
                stats.max_hold_time = max(stats.max_hold_time, hold_time)
                stats.last_released = datetime.now()
                # Reentrant acquire: the outer frame still holds the lock
                self._active_holders[lock_name] = previous_holder

            lock.release()

    @contextmanager
    def acquire_widget(self, widget_id: WidgetInstanceId, timeout: Optional[float] = None):
        """
        Serialize work on one widget's preferences.

        Raises:
            TimeoutError: If another thread holds the widget past the timeout
        """
        with self.acquire(widget_id.lock_name(), timeout=timeout, create=True):
            yield

    def discard_lock(self, name: str) -> bool:
        """
        Forget a named lock and its statistics.

        Only idle locks are dropped; a lock that is held or waited on stays.

        Returns:
            True if the lock was removed
        """
        with self._meta_lock:
            if name not in self._locks:
                return False
            if self._active_holders.get(name) is not None or self._waiters.get(name, 0) > 0:
                return False
            del self._locks[name]
            self._stats.pop(name, None)
            self._active_holders.pop(name, None)
            self._waiters.pop(name, None)
            return True

    def discard_widget(self, widget_id: WidgetInstanceId) -> bool:
        """Drop the lock of a widget that no longer exists."""
        return self.discard_lock(widget_id.lock_name())

    def get_stats(self, lock_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Get statistics for locks.

        Args:
            lock_name: Specific lock name, or None for all locks

        Returns:
            Dict of lock statistics
        """
        with self._meta_lock:
            if lock_name:
                if lock_name in self._stats:
                    return {"lock_name": lock_name, **self._summarize(lock_name)}
                return {}

            return {name: self._summarize(name) for name in self._stats}

    def _summarize(self, name: str) -> Dict[str, Any]:
        stats = self._stats[name]
        return {
            "acquisitions": stats.acquisitions,
            "contentions": stats.contentions,
            "timeouts": stats.timeouts,
            "avg_wait_time": stats.total_wait_time / max(stats.acquisitions, 1),
            "max_wait_time": stats.max_wait_time,
            "avg_hold_time": stats.total_hold_time / max(stats.acquisitions, 1),
            "max_hold_time": stats.max_hold_time,
            "currently_held": self._active_holders.get(name) is not None
        }

    def log_stats(self) -> None:
        """Log current lock statistics."""
        stats = self.get_stats()

        log_section("Lock Statistics", "🔒")

        for name, data in stats.items():
            if data["acquisitions"] > 0:
                log_subsection(
                    f"{name}: {data['acquisitions']} acq, "
                    f"{data['contentions']} contentions, "
                    f"avg wait {data['avg_wait_time']*1000:.1f}ms, "
                    f"avg hold {data['avg_hold_time']*1000:.1f}ms"
                )


# Global lock manager instance
_lock_manager: Optional[LockManager] = None


def get_lock_manager() -> LockManager:
    """Get the global lock manager instance."""
    global _lock_manager
    if _lock_manager is None:
        _lock_manager = LockManager()
    return _lock_manager


def init_lock_manager() -> LockManager:
    """Initialize the global lock manager."""
    global _lock_manager
    _lock_manager = LockManager()
    return _lock_manager
