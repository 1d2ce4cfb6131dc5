"""
Random Quotes - CLI Interface
Rich terminal front end for configuring widgets and showing quotes
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

import config
from core.logger import log_error
from core.errors import StorageError
from core.widget import parse_widget_id
from quotes.configuration import QuoteConfigurator, get_configurator
from quotes.rotation import QuoteRotationTimer


class QuotesCLI:
    """
    Terminal stand-in for the home-screen widget and its configuration screen.

    Every command returns a process exit code.
    """

    def __init__(self, configurator: Optional[QuoteConfigurator] = None, console: Optional[Console] = None):
        self.configurator = configurator or get_configurator()
        self.console = console or Console()

    def configure(self, widget_id: str, user_input: str) -> int:
        """Save the semicolon-separated file list for a widget."""
        result = self.configurator.submit(widget_id, user_input)

        style = "green" if result.ok else "red"
        self.console.print(Panel(Text(result.format_log()), title="Configuration", border_style=style))

        if not result.ok:
            return 1

        try:
            self._print_quote(self.configurator.random_quote(result.widget_id))
        except StorageError as e:
            self._print_error(str(e))
            return 1
        return 0

    def show(self, widget_id: str) -> int:
        """Print the widget's source files and stored quotes."""
        wid = parse_widget_id(widget_id)
        if wid is None:
            self._print_error(f"Invalid widget id: {widget_id}")
            return 1

        try:
            paths = self.configurator.current_paths(wid)
            quotes = self.configurator.current_quotes(wid)
            state = self.configurator.widget_state(wid)
        except StorageError as e:
            self._print_error(str(e))
            return 1

        table = Table(title=f"Widget {wid} ({state.value})")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Quote")
        for index, quote in enumerate(quotes, start=1):
            table.add_row(str(index), Text(quote))

        self.console.print("Source files:")
        for path in paths:
            self.console.print(Text(f"  {path}"))
        self.console.print(table)
        return 0

    def quote(self, widget_id: str) -> int:
        """Print one random quote for the widget."""
        wid = parse_widget_id(widget_id)
        if wid is None:
            self._print_error(f"Invalid widget id: {widget_id}")
            return 1

        try:
            self._print_quote(self.configurator.random_quote(wid))
        except StorageError as e:
            self._print_error(str(e))
            return 1
        return 0

    def watch(self, widget_id: str, interval: float = config.QUOTE_REFRESH_INTERVAL) -> int:
        """Show a new random quote every interval seconds until Ctrl+C."""
        wid = parse_widget_id(widget_id)
        if wid is None:
            self._print_error(f"Invalid widget id: {widget_id}")
            return 1

        try:
            self.configurator.widget_state(wid)
        except StorageError as e:
            self._print_error(str(e))
            return 1

        timer = QuoteRotationTimer(
            wid,
            self.configurator.processor,
            interval=interval,
            enabled=config.QUOTE_ROTATION_ENABLED,
            on_quote=self._print_quote
        )
        timer.start()
        if not timer.is_running():
            return 0
        try:
            while not timer.wait(1.0):
                pass
        except KeyboardInterrupt:
            self.console.print()
        finally:
            timer.stop()
        return 0

    def remove(self, widget_id: str) -> int:
        """Forget a widget's configuration."""
        wid = parse_widget_id(widget_id)
        if wid is None:
            self._print_error(f"Invalid widget id: {widget_id}")
            return 1

        try:
            self.configurator.remove_widget(wid)
        except (StorageError, TimeoutError) as e:
            self._print_error(str(e))
            return 1
        self.console.print(f"Widget {wid} removed")
        return 0

    def list_widgets(self) -> int:
        """List every widget with stored preferences."""
        table = Table(title="Configured widgets")
        table.add_column("Widget", justify="right")
        table.add_column("Files", justify="right")
        table.add_column("Quotes", justify="right")

        try:
            for wid in self.configurator.store.list_widget_ids():
                table.add_row(
                    str(wid),
                    str(len(self.configurator.current_paths(wid))),
                    str(len(self.configurator.current_quotes(wid)))
                )
        except StorageError as e:
            self._print_error(str(e))
            return 1

        self.console.print(table)
        return 0

    def _print_error(self, message: str) -> None:
        # Shown even when diagnostic console logging is off
        log_error(message)
        self.console.print(Panel(Text(message), title="Error", border_style="red"))

    def _print_quote(self, quote: Optional[str]) -> None:
        if quote is None:
            self.console.print(Panel(config.NO_QUOTES_MESSAGE, border_style="yellow"))
        else:
            self.console.print(Panel(Text(quote), border_style="cyan"))


# Global CLI instance
_cli: Optional[QuotesCLI] = None


def get_cli() -> QuotesCLI:
    """Get the global CLI instance."""
    global _cli
    if _cli is None:
        _cli = QuotesCLI()
    return _cli


def init_cli(configurator: Optional[QuoteConfigurator] = None) -> QuotesCLI:
    """Initialize the global CLI instance."""
    global _cli
    _cli = QuotesCLI(configurator)
    return _cli
