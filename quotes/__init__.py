"""
Random Quotes - Quote Ingestion

Turns plain-text files into per-widget quote collections and serves random
quotes back to the display.

    from quotes import get_configurator
    result = get_configurator().submit(widget_id, "/sdcard/a.txt;/sdcard/b.txt")
"""

from quotes.files_processor import FileProcessor, split_path_string, get_file_processor, init_file_processor
from quotes.configuration import (
    QuoteConfigurator,
    ConfigurationResult,
    SaveStatus,
    append_picked_path,
    get_configurator,
    init_configurator,
)
from quotes.rotation import QuoteRotationTimer

__all__ = [
    "FileProcessor",
    "split_path_string",
    "get_file_processor",
    "init_file_processor",
    "QuoteConfigurator",
    "ConfigurationResult",
    "SaveStatus",
    "append_picked_path",
    "get_configurator",
    "init_configurator",
    "QuoteRotationTimer",
]
