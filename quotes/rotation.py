"""
Random Quotes - Quote Rotation Timer
Periodically picks a random quote for a widget and hands it to the display
"""

import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from core.logger import log_info, log_error
from core.widget import WidgetInstanceId
from quotes.files_processor import FileProcessor


class QuoteRotationTimer:
    """
    Timer that refreshes the displayed quote on a fixed interval.

    The callback receives the selected quote, or None when the widget has no
    quotes (the display shows its "nothing configured" state).
    """

    def __init__(
        self,
        widget_id: WidgetInstanceId,
        processor: FileProcessor,
        interval: float = 30.0,
        enabled: bool = True,
        on_quote: Optional[Callable[[Optional[str]], None]] = None
    ):
        """
        Args:
            widget_id: Widget whose quotes are rotated
            processor: Processor used to select quotes
            interval: Seconds between refreshes
            enabled: Whether the timer runs at all
            on_quote: Display callback
        """
        self.widget_id = widget_id
        self.processor = processor
        self.interval = interval
        self.enabled = enabled
        self._on_quote = on_quote

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._refresh_count = 0
        self._last_refresh: Optional[datetime] = None
        self._state_lock = threading.Lock()

    def start(self) -> None:
        """Show a first quote immediately, then refresh every interval."""
        if not self.enabled:
            log_info("Quote rotation disabled", prefix="⏱️")
            return

        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._timer_loop,
            daemon=True,
            name=f"QuoteRotation-{self.widget_id}"
        )
        self._thread.start()
        log_info(f"Quote rotation started for widget {self.widget_id} ({self.interval}s interval)", prefix="⏱️")

    def stop(self) -> None:
        """Stop the timer thread."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None
        log_info(f"Quote rotation stopped for widget {self.widget_id}", prefix="⏱️")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the timer is stopped. Returns True if it was."""
        return self._stop_event.wait(timeout)

    def set_callback(self, callback: Callable[[Optional[str]], None]) -> None:
        self._on_quote = callback

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def refresh_now(self) -> Optional[str]:
        """Select a quote and deliver it to the callback right away."""
        quote, ok = self.processor.select_random_quote(self.widget_id)
        selected = quote if ok else None

        with self._state_lock:
            self._refresh_count += 1
            self._last_refresh = datetime.now()

        if self._on_quote:
            try:
                self._on_quote(selected)
            except Exception as e:
                log_error(f"Error in quote display callback: {e}")
        return selected

    def _timer_loop(self) -> None:
        """Refresh, then sleep until the next interval or a stop request."""
        while not self._stop_event.is_set():
            try:
                self.refresh_now()
            except Exception as e:
                log_error(f"Quote rotation error: {e}")

            self._stop_event.wait(self.interval)

    def get_stats(self) -> Dict[str, Any]:
        """Get timer statistics."""
        with self._state_lock:
            return {
                "widget_id": self.widget_id.value,
                "enabled": self.enabled,
                "is_running": self.is_running(),
                "interval": self.interval,
                "refresh_count": self._refresh_count,
                "last_refresh": self._last_refresh.isoformat() if self._last_refresh else None
            }
