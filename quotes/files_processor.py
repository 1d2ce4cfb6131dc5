"""
Random Quotes - Quote File Processor

Turns user-entered file paths into quotes:
- split the configuration input on ';'
- validate each candidate (non-empty, existing regular file, exactly '.txt')
- read every file and keep each non-blank line as one quote
- store the result for a widget and pick random quotes back out of it
"""

import random
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

import config
from core.errors import IngestionError
from core.logger import log_info, log_warning, log_debug
from core.preferences import PreferenceStore


def split_path_string(user_input: Optional[str], separator: str = config.QUOTE_PATH_SEPARATOR) -> List[str]:
    """
    Split the raw configuration input into path candidates.

    Entries are not trimmed or filtered here: a blank submission comes back
    as [""], so validation rejects it instead of treating it as "no files".
    """
    return (user_input or "").split(separator)


def _has_quote_extension(path: str, extension: str) -> bool:
    """Case-sensitive check of the suffix after the last '.'."""
    name = Path(path).name
    if "." not in name:
        return False
    return name.rsplit(".", 1)[1] == extension


class FileProcessor:
    """
    Validates, reads, and stores quote files for widgets.

    Holds no state of its own besides the preference store it writes to.
    """

    def __init__(
        self,
        store: PreferenceStore,
        extension: str = config.QUOTE_FILE_EXTENSION,
        encoding: str = config.QUOTE_FILE_ENCODING,
        max_workers: int = config.INGEST_MAX_WORKERS,
        rng: Optional[random.Random] = None
    ):
        self.store = store
        self.extension = extension
        self.encoding = encoding
        self.max_workers = max(1, max_workers)
        self._rng = rng or random.Random()

    def validate_paths(self, candidates: Sequence[str]) -> bool:
        """
        Check every candidate path.

        All-or-nothing: one bad entry fails the whole batch. Nothing is
        written; this only looks at the filesystem.

        Returns:
            True if every candidate is an existing .txt file
        """
        if not candidates:
            log_warning("No file paths given")
            return False

        valid = True
        for raw in candidates:
            candidate = (raw or "").strip()

            if not candidate:
                log_warning("Empty file path entry")
                valid = False
            elif not self._is_accessible_file(candidate):
                log_warning(f"Not an existing file: {candidate}")
                valid = False
            elif not _has_quote_extension(candidate, self.extension):
                log_warning(f"Not a .{self.extension} file: {candidate}")
                valid = False

        return valid

    @staticmethod
    def _is_accessible_file(candidate: str) -> bool:
        # is_file() only swallows "missing" errors; name-too-long and
        # permission errors still raise
        try:
            return Path(candidate).is_file()
        except (OSError, ValueError) as e:
            log_warning(f"Cannot access {candidate}: {e}")
            return False

    def read_quotes(self, path: str) -> List[str]:
        """
        Read one file and return its non-blank lines, trimmed, in file order.

        Raises:
            IngestionError: If the file cannot be opened or decoded
        """
        file_path = Path(path.strip())
        try:
            text = file_path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise IngestionError(str(file_path), str(e)) from e

        quotes = [line.strip() for line in text.splitlines() if line.strip()]
        log_debug(f"Read {len(quotes)} quote(s) from {file_path}")
        return quotes

    def ingest_files(self, paths: Sequence[str]) -> List[str]:
        """
        Build the quote collection for a path list.

        Quotes are concatenated in path-list order even when files are read
        in parallel. The same path listed twice contributes its quotes twice.

        Raises:
            IngestionError: If any file is unreadable. No partial collection
                is returned.
        """
        if self.max_workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                # map() yields results in input order and re-raises the first error
                per_file = list(pool.map(self.read_quotes, paths))
        else:
            per_file = [self.read_quotes(path) for path in paths]

        quotes: List[str] = []
        for file_quotes in per_file:
            quotes.extend(file_quotes)

        log_info(f"Processed {len(paths)} file(s) into {len(quotes)} quote(s)", prefix="📄")
        return quotes

    def process_and_store(self, widget_id: Any, paths: Sequence[str]) -> List[str]:
        """
        Ingest the files and store the quotes for the widget.

        The caller writes the paths first; this only replaces the quotes.

        Returns:
            The stored quote collection
        """
        quotes = self.ingest_files(paths)
        self.store.write_quotes(widget_id, quotes)
        return quotes

    def select_random_quote(self, widget_id: Any) -> Tuple[str, bool]:
        """
        Pick one stored quote uniformly at random.

        Returns:
            (quote, True), or ("", False) when the widget has no quotes
        """
        quotes = self.store.read_quotes(widget_id)
        if not quotes:
            return "", False
        return self._rng.choice(quotes), True


# Global processor instance
_file_processor: Optional[FileProcessor] = None


def get_file_processor() -> FileProcessor:
    """Get the global file processor instance."""
    global _file_processor
    if _file_processor is None:
        _file_processor = FileProcessor(PreferenceStore())
    return _file_processor


def init_file_processor(store: Optional[PreferenceStore] = None) -> FileProcessor:
    """Initialize the global file processor."""
    global _file_processor
    _file_processor = FileProcessor(store or PreferenceStore())
    return _file_processor
