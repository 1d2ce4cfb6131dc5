"""
Tests for quote file validation, ingestion, and random selection.
"""

import os
import random
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from core.database import Database
from core.errors import IngestionError
from core.logger import setup_logging
from core.preferences import PreferenceStore
from core.widget import WidgetInstanceId
from quotes.files_processor import FileProcessor, split_path_string


def setUpModule():
    setup_logging(Path("unused.log"), log_to_file=False, log_to_console=False)


class FileProcessorTestCase(unittest.TestCase):
    """Base class with a temp directory for quote files and a fresh store."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        db = Database(self.dir / "preferences.db")
        db.initialize()
        self.store = PreferenceStore(db)
        self.processor = FileProcessor(self.store)
        self.wid = WidgetInstanceId(42)

    def tearDown(self):
        self._tmp.cleanup()

    def write_file(self, name: str, content: str = "quote\n") -> str:
        path = self.dir / name
        path.write_text(content, encoding="utf-8")
        return str(path)


class TestSplitPathString(unittest.TestCase):

    def test_splits_on_semicolon(self):
        self.assertEqual(split_path_string("a.txt;b.txt"), ["a.txt", "b.txt"])

    def test_blank_input_is_single_empty_entry(self):
        """Blank input must not look like 'zero files configured'."""
        self.assertEqual(split_path_string(""), [""])
        self.assertEqual(split_path_string(None), [""])

    def test_keeps_entries_untrimmed(self):
        self.assertEqual(split_path_string(" a.txt ; ;b.txt"), [" a.txt ", " ", "b.txt"])


class TestValidatePaths(FileProcessorTestCase):

    def test_existing_txt_files_are_valid(self):
        paths = [self.write_file("a.txt"), self.write_file("b.txt")]
        self.assertTrue(self.processor.validate_paths(paths))

    def test_surrounding_whitespace_is_trimmed(self):
        path = self.write_file("a.txt")
        self.assertTrue(self.processor.validate_paths([f"  {path}\t"]))

    def test_empty_entry_invalidates_batch(self):
        """['notes.txt', ''] fails even though notes.txt exists."""
        notes = self.write_file("notes.txt")
        self.assertFalse(self.processor.validate_paths([notes, ""]))

    def test_whitespace_only_entry_invalidates_batch(self):
        notes = self.write_file("notes.txt")
        self.assertFalse(self.processor.validate_paths([notes, "   "]))

    def test_single_empty_string_is_invalid(self):
        self.assertFalse(self.processor.validate_paths(split_path_string("")))

    def test_empty_list_is_invalid(self):
        self.assertFalse(self.processor.validate_paths([]))

    def test_missing_file_is_invalid(self):
        self.assertFalse(self.processor.validate_paths([str(self.dir / "nope.txt")]))

    def test_directory_is_invalid(self):
        folder = self.dir / "folder.txt"
        folder.mkdir()
        self.assertFalse(self.processor.validate_paths([str(folder)]))

    def test_extension_must_be_exactly_txt(self):
        for name in ("upper.TXT", "mixed.Txt", "notes.md", "noext", "archive.txt.gz", "txt"):
            with self.subTest(name=name):
                path = self.write_file(name)
                self.assertFalse(self.processor.validate_paths([path]))

    def test_one_bad_path_fails_all(self):
        good = self.write_file("good.txt")
        bad = self.write_file("bad.csv")
        self.assertFalse(self.processor.validate_paths([good, bad, good]))

    def test_overlong_path_is_invalid(self):
        """A name the OS rejects is a validation failure, not an exception."""
        path = str(self.dir / ("x" * 5000 + ".txt"))
        self.assertFalse(self.processor.validate_paths([path]))

    def test_path_with_nul_byte_is_invalid(self):
        self.assertFalse(self.processor.validate_paths([str(self.dir / "bad\x00.txt")]))

    @unittest.skipIf(not hasattr(os, "geteuid") or os.geteuid() == 0, "root ignores directory permissions")
    def test_file_in_unreadable_directory_is_invalid(self):
        locked = self.dir / "locked"
        locked.mkdir()
        (locked / "a.txt").write_text("quote\n", encoding="utf-8")
        locked.chmod(0o000)
        try:
            self.assertFalse(self.processor.validate_paths([str(locked / "a.txt")]))
        finally:
            locked.chmod(0o755)

    def test_validation_writes_nothing(self):
        self.processor.validate_paths([self.write_file("a.txt")])
        self.assertFalse(self.store.has_record(self.wid))


class TestIngestFiles(FileProcessorTestCase):

    def test_blank_lines_are_dropped(self):
        """'Hello\\n\\nWorld\\n' gives ['Hello', 'World']."""
        path = self.write_file("a.txt", "Hello\n\nWorld\n")
        self.assertEqual(self.processor.ingest_files([path]), ["Hello", "World"])

    def test_n_non_blank_lines_give_n_quotes_in_order(self):
        lines = ["first", "", "second", "   ", "third", "\t", "", "fourth"]
        path = self.write_file("a.txt", "\n".join(lines))
        self.assertEqual(
            self.processor.ingest_files([path]),
            ["first", "second", "third", "fourth"]
        )

    def test_windows_line_endings(self):
        path = self.write_file("a.txt", "one\r\n\r\ntwo\r\n")
        self.assertEqual(self.processor.ingest_files([path]), ["one", "two"])

    def test_quotes_concatenate_in_path_order(self):
        a = self.write_file("a.txt", "a1\na2\n")
        b = self.write_file("b.txt", "b1\n")
        self.assertEqual(self.processor.ingest_files([b, a]), ["b1", "a1", "a2"])

    def test_duplicate_path_is_read_twice(self):
        a = self.write_file("a.txt", "only\n")
        self.assertEqual(self.processor.ingest_files([a, a]), ["only", "only"])

    def test_empty_file_gives_no_quotes(self):
        a = self.write_file("a.txt", "\n\n")
        self.assertEqual(self.processor.ingest_files([a]), [])

    def test_path_with_whitespace_is_read(self):
        a = self.write_file("a.txt", "x\n")
        self.assertEqual(self.processor.ingest_files([f" {a} "]), ["x"])

    def test_file_deleted_after_validation_raises(self):
        """A vanished file is a failure, not a silently shorter collection."""
        a = self.write_file("a.txt", "a\n")
        b = self.write_file("b.txt", "b\n")
        self.assertTrue(self.processor.validate_paths([a, b]))
        os.remove(b)

        with self.assertRaises(IngestionError) as ctx:
            self.processor.ingest_files([a, b])
        self.assertEqual(ctx.exception.path, b)

    def test_undecodable_file_raises(self):
        path = self.dir / "binary.txt"
        path.write_bytes(b"\xff\xfe\xfa not utf-8")
        with self.assertRaises(IngestionError):
            self.processor.ingest_files([str(path)])

    def test_parallel_reads_keep_path_order(self):
        names = [f"f{i}.txt" for i in range(8)]
        paths = [self.write_file(name, f"{name} line 1\n\n{name} line 2\n") for name in names]
        parallel = FileProcessor(self.store, max_workers=4)

        expected = []
        for name in names:
            expected.extend([f"{name} line 1", f"{name} line 2"])
        self.assertEqual(parallel.ingest_files(paths), expected)

    def test_parallel_read_failure_raises(self):
        a = self.write_file("a.txt")
        parallel = FileProcessor(self.store, max_workers=4)
        with self.assertRaises(IngestionError):
            parallel.ingest_files([a, str(self.dir / "gone.txt"), a])


class TestProcessAndStore(FileProcessorTestCase):

    def test_stores_quotes_for_widget(self):
        a = self.write_file("a.txt", "one\ntwo\n")
        self.store.write_paths(self.wid, [a])

        quotes = self.processor.process_and_store(self.wid, [a])

        self.assertEqual(quotes, ["one", "two"])
        self.assertEqual(self.store.read_quotes(self.wid), ["one", "two"])
        self.assertEqual(self.store.read_paths(self.wid), [a])

    def test_is_idempotent(self):
        a = self.write_file("a.txt", "one\n\ntwo\n")
        b = self.write_file("b.txt", "three\n")

        first = self.processor.process_and_store(self.wid, [a, b])
        stored_first = self.store.read_quotes(self.wid)
        second = self.processor.process_and_store(self.wid, [a, b])

        self.assertEqual(first, second)
        self.assertEqual(stored_first, self.store.read_quotes(self.wid))

    def test_failed_ingest_does_not_touch_stored_quotes(self):
        self.store.write_quotes(self.wid, ["previous"])
        with self.assertRaises(IngestionError):
            self.processor.process_and_store(self.wid, [str(self.dir / "gone.txt")])
        self.assertEqual(self.store.read_quotes(self.wid), ["previous"])


class TestSelectRandomQuote(FileProcessorTestCase):

    def test_no_quotes_is_not_ok(self):
        self.assertEqual(self.processor.select_random_quote(self.wid), ("", False))

    def test_single_quote_is_always_returned(self):
        self.store.write_quotes(self.wid, ["the only one"])
        for _ in range(20):
            self.assertEqual(self.processor.select_random_quote(self.wid), ("the only one", True))

    def test_selection_comes_from_stored_quotes(self):
        quotes = ["a", "b", "c", "d"]
        self.store.write_quotes(self.wid, quotes)
        processor = FileProcessor(self.store, rng=random.Random(1234))

        seen = {processor.select_random_quote(self.wid)[0] for _ in range(200)}
        self.assertTrue(seen.issubset(set(quotes)))
        self.assertEqual(seen, set(quotes))

    def test_uses_rng_choice(self):
        self.store.write_quotes(self.wid, ["a", "b"])
        rng = random.Random()
        processor = FileProcessor(self.store, rng=rng)
        with patch.object(rng, "choice", return_value="b") as choice:
            self.assertEqual(processor.select_random_quote(self.wid), ("b", True))
        choice.assert_called_once_with(["a", "b"])


if __name__ == "__main__":
    unittest.main()
