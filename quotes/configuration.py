"""
Random Quotes - Widget Configuration Flow

The backend behind the configuration screen. A presentation layer only needs:
- submit(widget_id, path_string) -> ConfigurationResult
- current_quotes(widget_id) / random_quote(widget_id)
- remove_widget(widget_id) when the widget is taken off the home screen

A save is validate -> ingest -> replace record, run under the widget's lock so
stored paths and quotes always belong together.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

import config
from concurrency.locks import LockManager, get_lock_manager
from core.errors import IngestionError, QuoteError, QuoteErrorType, StorageError, MissingWidgetIdError
from core.logger import log_info, log_success, log_warning, log_error
from core.preferences import PreferenceStore
from core.widget import WidgetInstanceId, WidgetState, parse_widget_id
from quotes.files_processor import FileProcessor, split_path_string

INVALID_PATHS_MESSAGE = "Incorrect file path or no .txt file extension"


class SaveStatus(Enum):
    """Outcome of a configuration save."""
    SAVED = "saved"
    INVALID_PATHS = "invalid_paths"
    INGESTION_FAILED = "ingestion_failed"
    STORAGE_FAILED = "storage_failed"
    NO_INSTANCE = "no_instance"
    BUSY = "busy"


@dataclass
class ConfigurationResult:
    """
    What the configuration screen shows after a submit.

    Attributes:
        status: How the save ended
        widget_id: The widget that was configured (None if missing)
        paths: The path candidates parsed from the input
        quotes: Quotes now stored for the widget (for the first widget update)
        messages: Ordered log lines for the user
        error: Structured error when the save did not succeed
    """
    status: SaveStatus
    widget_id: Optional[WidgetInstanceId] = None
    paths: List[str] = field(default_factory=list)
    quotes: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)
    error: Optional[QuoteError] = None

    @property
    def ok(self) -> bool:
        return self.status == SaveStatus.SAVED

    def format_log(self) -> str:
        """Render the message log the way the configuration screen shows it."""
        return "\n".join(f"* {m}" for m in self.messages)


def append_picked_path(current_input: Optional[str], picked_path: str) -> str:
    """
    Add a path chosen in a file picker to the configuration input.

    A blank input becomes the picked path; otherwise it is appended after ';'.
    """
    current = current_input or ""
    if not current.strip():
        return picked_path
    return f"{current}{config.QUOTE_PATH_SEPARATOR}{picked_path}"


class QuoteConfigurator:
    """Runs configuration saves and answers display queries for widgets."""

    def __init__(
        self,
        store: PreferenceStore,
        processor: Optional[FileProcessor] = None,
        lock_manager: Optional[LockManager] = None,
        lock_timeout: Optional[float] = config.SAVE_LOCK_TIMEOUT_SECONDS
    ):
        self.store = store
        self.processor = processor or FileProcessor(store)
        self.lock_manager = lock_manager or get_lock_manager()
        self.lock_timeout = lock_timeout

    def submit(self, widget_id: Any, user_input: Optional[str]) -> ConfigurationResult:
        """
        Validate and save a widget's quote files.

        Never raises for validation, ingestion, or storage problems; they come
        back as the result status so the user can correct and re-submit.
        """
        wid = parse_widget_id(widget_id)
        if wid is None:
            log_warning(f"Configuration submitted without a widget instance (got {widget_id!r})")
            return ConfigurationResult(
                status=SaveStatus.NO_INSTANCE,
                messages=["No widget instance, nothing was saved"],
                error=QuoteError.from_exception(MissingWidgetIdError())
            )

        result = ConfigurationResult(status=SaveStatus.SAVED, widget_id=wid)
        self._note(result, f"Our Widget Instance ID: {wid}")
        self._note(result, f"User Input: {user_input or ''}")

        try:
            with self.lock_manager.acquire_widget(wid, timeout=self.lock_timeout):
                self._save(wid, user_input, result)
        except TimeoutError as e:
            log_error(f"Save for widget {wid} timed out waiting for another save: {e}")
            result.status = SaveStatus.BUSY
            result.error = QuoteError(
                QuoteErrorType.BUSY,
                f"Widget {wid} is being saved by another request",
                hint="Please try again in a moment"
            )
            self._note(result, result.error.message)

        return result

    def _save(self, wid: WidgetInstanceId, user_input: Optional[str], result: ConfigurationResult) -> None:
        paths = split_path_string(user_input)
        result.paths = paths

        if not self.processor.validate_paths(paths):
            result.status = SaveStatus.INVALID_PATHS
            result.error = QuoteError(
                QuoteErrorType.VALIDATION,
                INVALID_PATHS_MESSAGE,
                hint="Please re-submit"
            )
            self._note(result, f"{INVALID_PATHS_MESSAGE}, please re-submit")
            return

        self._note(result, "Processing Text Files to Quotes")
        try:
            quotes = self.processor.ingest_files(paths)
        except IngestionError as e:
            log_error(str(e))
            result.status = SaveStatus.INGESTION_FAILED
            result.error = QuoteError.from_exception(
                e, hint="Previous configuration was kept; check the file and re-submit"
            )
            self._note(result, str(e))
            return

        self._note(result, "Storing user preferences")
        try:
            self.store.replace_record(wid, paths, quotes)
        except StorageError as e:
            result.status = SaveStatus.STORAGE_FAILED
            result.error = QuoteError.from_exception(e)
            self._note(result, str(e))
            return

        result.quotes = quotes
        self._note(result, "Configuration Complete")
        log_success(f"Widget {wid} configured with {len(paths)} file(s), {len(quotes)} quote(s)")

    @staticmethod
    def _note(result: ConfigurationResult, message: str) -> None:
        result.messages.append(message)
        log_info(message)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current_quotes(self, widget_id: Any) -> List[str]:
        """All quotes stored for the widget ([] if none)."""
        return self.store.read_quotes(widget_id)

    def current_paths(self, widget_id: Any) -> List[str]:
        """The source files the widget was configured with ([] if none)."""
        return self.store.read_paths(widget_id)

    def random_quote(self, widget_id: Any) -> Optional[str]:
        """One random quote, or None when the widget has nothing to show."""
        quote, ok = self.processor.select_random_quote(widget_id)
        return quote if ok else None

    def widget_state(self, widget_id: Any) -> WidgetState:
        return self.store.widget_state(widget_id)

    def remove_widget(self, widget_id: Any) -> None:
        """Drop everything stored for a widget that was removed."""
        wid = parse_widget_id(widget_id)
        if wid is None:
            raise MissingWidgetIdError()
        with self.lock_manager.acquire_widget(wid, timeout=self.lock_timeout):
            self.store.delete_record(wid)
        self.lock_manager.discard_widget(wid)
        log_info(f"Removed preferences for widget {wid}", prefix="🗑️")


# Global configurator instance
_configurator: Optional[QuoteConfigurator] = None


def get_configurator() -> QuoteConfigurator:
    """Get the global configurator instance."""
    global _configurator
    if _configurator is None:
        _configurator = QuoteConfigurator(PreferenceStore())
    return _configurator


def init_configurator(
    store: Optional[PreferenceStore] = None,
    processor: Optional[FileProcessor] = None
) -> QuoteConfigurator:
    """Initialize the global configurator."""
    global _configurator
    store = store or (processor.store if processor else PreferenceStore())
    _configurator = QuoteConfigurator(store, processor=processor)
    return _configurator
