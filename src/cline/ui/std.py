from __future__ import annotations
from typing import Optional

from rich.console import Console


class StdUI:
    """
    Terminal UIHost: info in cyan, warnings in yellow, errors in red on stderr.
    """

    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None):
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def info(self, msg: str) -> None:
        self.console.print(msg, style="bright_cyan", markup=False)

    def warn(self, msg: str) -> None:
        self.console.print(msg, style="bright_yellow", markup=False)

    def error(self, msg: str) -> None:
        self.err_console.print(msg, style="bright_red", markup=False)
