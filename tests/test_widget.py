"""
Tests for widget instance id parsing.
"""

import unittest

from core.widget import INVALID_WIDGET_ID, WidgetInstanceId, parse_widget_id


class TestParseWidgetId(unittest.TestCase):

    def test_sentinel_and_missing_values_are_none(self):
        for raw in (None, INVALID_WIDGET_ID, -1, "", "   ", "abc", "1.5", 2.0, True, False):
            with self.subTest(raw=raw):
                self.assertIsNone(parse_widget_id(raw))

    def test_valid_values(self):
        self.assertEqual(parse_widget_id(7), WidgetInstanceId(7))
        self.assertEqual(parse_widget_id("7"), WidgetInstanceId(7))
        self.assertEqual(parse_widget_id(" 12 "), WidgetInstanceId(12))

    def test_typed_id_passes_through(self):
        wid = WidgetInstanceId(3)
        self.assertIs(parse_widget_id(wid), wid)


class TestWidgetInstanceId(unittest.TestCase):

    def test_rejects_sentinel(self):
        with self.assertRaises(ValueError):
            WidgetInstanceId(0)

    def test_rejects_non_int(self):
        with self.assertRaises(TypeError):
            WidgetInstanceId("5")
        with self.assertRaises(TypeError):
            WidgetInstanceId(True)

    def test_lock_name_and_str(self):
        wid = WidgetInstanceId(9)
        self.assertEqual(wid.lock_name(), "widget:9")
        self.assertEqual(str(wid), "9")

    def test_hashable_and_ordered(self):
        ids = {WidgetInstanceId(2), WidgetInstanceId(2), WidgetInstanceId(1)}
        self.assertEqual(sorted(ids), [WidgetInstanceId(1), WidgetInstanceId(2)])


if __name__ == "__main__":
    unittest.main()
