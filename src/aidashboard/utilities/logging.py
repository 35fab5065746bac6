import json
import logging
from datetime import datetime
from functools import lru_cache
from typing import Any

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from aidashboard.utilities.serialization import to_serializable

ROOT_LOGGER = "aidashboard"


@lru_cache()
def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = RichHandler(rich_tracebacks=True, markup=False, show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return root


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Loggers are children of the `aidashboard` logger, which renders
    through rich. Pass a short component name, e.g. `get_logger("Client")`.
    """
    root = _configure_root()
    if not name:
        return root
    return root.getChild(name)


logger = get_logger()


def format_timestamp(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%l:%M:%S %p")


def create_panel(content: Any, title: str, timestamp: float, color: str):
    return Panel(
        content,
        title=f"[bold]{title}[/]",
        subtitle=f"[italic]{format_timestamp(timestamp)}[/]",
        title_align="left",
        subtitle_align="right",
        border_style=color,
        box=box.ROUNDED,
        width=100,
        expand=True,
        padding=(1, 2),
    )


def pretty_log(*args, **kwargs):
    """
    Print a rich debug panel with the given payload.
    Only prints when the `aidashboard` logger is at DEBUG level.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    color = kwargs.pop("color", "green")
    title = kwargs.pop("title", "DEBUG")
    data = {
        "args": to_serializable(args),
        "kwargs": to_serializable(kwargs),
    }
    message = json.dumps(data, indent=4, ensure_ascii=False)
    panel = create_panel(message, title, datetime.now().timestamp(), color)
    Console(stderr=True).print(panel)
