"""
Tests for per-widget lock management.
"""

import threading
import time
import unittest
from pathlib import Path

from concurrency.locks import LockManager, get_lock_manager, init_lock_manager
from core.logger import setup_logging
from core.widget import WidgetInstanceId


def setUpModule():
    setup_logging(Path("unused.log"), log_to_file=False, log_to_console=False)


class TestLockManager(unittest.TestCase):

    def setUp(self):
        self.locks = LockManager()

    def test_widget_lock_created_on_demand(self):
        wid = WidgetInstanceId(3)
        self.assertFalse(self.locks.has_lock("widget:3"))
        with self.locks.acquire_widget(wid):
            self.assertTrue(self.locks.get_stats("widget:3")["currently_held"])
        self.assertFalse(self.locks.get_stats("widget:3")["currently_held"])
        self.assertEqual(self.locks.get_stats("widget:3")["acquisitions"], 1)

    def test_widget_lock_is_reentrant(self):
        wid = WidgetInstanceId(3)
        with self.locks.acquire_widget(wid):
            with self.locks.acquire_widget(wid, timeout=0.1):
                pass
            self.assertTrue(self.locks.get_stats("widget:3")["currently_held"])

    def test_unknown_lock_raises(self):
        with self.assertRaises(KeyError):
            with self.locks.acquire("nope"):
                pass

    def test_timeout_when_held_elsewhere(self):
        wid = WidgetInstanceId(1)
        holding = threading.Event()
        release = threading.Event()

        def hold():
            with self.locks.acquire_widget(wid):
                holding.set()
                release.wait(5.0)

        thread = threading.Thread(target=hold)
        thread.start()
        try:
            self.assertTrue(holding.wait(5.0))
            with self.assertRaises(TimeoutError):
                with self.locks.acquire_widget(wid, timeout=0.05):
                    pass
        finally:
            release.set()
            thread.join(timeout=5.0)

        stats = self.locks.get_stats("widget:1")
        self.assertEqual(stats["timeouts"], 1)
        self.assertGreaterEqual(stats["contentions"], 1)

    def test_different_widgets_do_not_block(self):
        holding = threading.Event()
        release = threading.Event()

        def hold():
            with self.locks.acquire_widget(WidgetInstanceId(1)):
                holding.set()
                release.wait(5.0)

        thread = threading.Thread(target=hold)
        thread.start()
        try:
            self.assertTrue(holding.wait(5.0))
            with self.locks.acquire_widget(WidgetInstanceId(2), timeout=0.5):
                acquired = True
        finally:
            release.set()
            thread.join(timeout=5.0)

        self.assertTrue(acquired)

    def test_discard_idle_widget_lock(self):
        wid = WidgetInstanceId(6)
        with self.locks.acquire_widget(wid):
            pass

        self.assertTrue(self.locks.discard_widget(wid))
        self.assertFalse(self.locks.has_lock("widget:6"))
        self.assertEqual(self.locks.get_stats("widget:6"), {})
        self.assertFalse(self.locks.discard_widget(wid))

        with self.locks.acquire_widget(wid, timeout=0.1):
            self.assertTrue(self.locks.has_lock("widget:6"))

    def test_discard_keeps_held_lock(self):
        wid = WidgetInstanceId(6)
        with self.locks.acquire_widget(wid):
            self.assertFalse(self.locks.discard_widget(wid))
        self.assertTrue(self.locks.has_lock("widget:6"))

    def test_discard_keeps_lock_with_waiter(self):
        wid = WidgetInstanceId(6)
        holding = threading.Event()
        release = threading.Event()
        waiter_done = threading.Event()

        def hold():
            with self.locks.acquire_widget(wid):
                holding.set()
                release.wait(5.0)

        def wait_for_it():
            with self.locks.acquire_widget(wid, timeout=5.0):
                waiter_done.set()

        holder = threading.Thread(target=hold)
        holder.start()
        self.assertTrue(holding.wait(5.0))
        waiter = threading.Thread(target=wait_for_it)
        waiter.start()
        try:
            # Wait until the second thread is blocked on the lock
            for _ in range(500):
                if self.locks.get_stats("widget:6")["contentions"] >= 1:
                    break
                time.sleep(0.01)
            self.assertFalse(self.locks.discard_widget(wid))
            release.set()
            holder.join(timeout=5.0)
            # Holder is gone but the waiter still needs the same lock object
            self.assertTrue(waiter_done.wait(5.0))
        finally:
            release.set()
            waiter.join(timeout=5.0)

        self.assertEqual(self.locks.get_stats("widget:6")["acquisitions"], 2)
        self.assertTrue(self.locks.discard_widget(wid))

    def test_stats_for_unknown_lock_are_empty(self):
        self.assertEqual(self.locks.get_stats("missing"), {})

    def test_log_stats_runs(self):
        with self.locks.acquire_widget(WidgetInstanceId(4)):
            pass
        self.locks.log_stats()
        self.assertIn("widget:4", self.locks.get_stats())


class TestGlobalLockManager(unittest.TestCase):

    def test_init_replaces_global(self):
        first = init_lock_manager()
        self.assertIs(get_lock_manager(), first)
        second = init_lock_manager()
        self.assertIsNot(first, second)
        self.assertIs(get_lock_manager(), second)


if __name__ == "__main__":
    unittest.main()
