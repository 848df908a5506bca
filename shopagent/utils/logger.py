# Console logging for the agent service.
# Author: Shibo Li
# Date: 2025-07-02
# Version: 0.3.0

import json
import logging
from typing import Any, Dict, Mapping
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

# Metadata keys whose values never reach the log in clear text.
SECRET_MARKERS = ("api_key", "access_token", "secret", "password")


def _log_success(self, message, *args, **kwargs):
    if self.isEnabledFor(SUCCESS_LEVEL_NUM):
        self._log(SUCCESS_LEVEL_NUM, message, args, **kwargs)


if not hasattr(logging.Logger, "success"):
    setattr(logging.Logger, "success", _log_success)


def mask_secret(name: str, value: Any) -> Any:
    """Replaces ``value`` with a short hint when ``name`` looks like a credential."""
    if not any(marker in name.lower() for marker in SECRET_MARKERS):
        return value
    text = str(value or "")
    return f"{text[:4]}***" if len(text) > 8 else "***"


def _format(message: str, meta: Mapping[str, Any]) -> str:
    if not meta:
        return message
    safe = {name: mask_secret(name, value) for name, value in meta.items()}
    return f"{message} {json.dumps(safe, ensure_ascii=False, default=str)}"


class ConsoleManager:
    """
    Rich-backed logger shared by the whole service. Every logging method takes
    keyword metadata that is appended to the line as JSON, with credential-like
    keys masked: ``console.info("RAG search finished", matched=3)``.
    """
    def __init__(self, name: str = "shopagent", level: str = "INFO"):
        self._console = Console(theme=Theme({"logging.level.success": "bold green"}), stderr=True)
        self._logger = logging.getLogger(name)
        if not self._logger.handlers:
            handler = RichHandler(
                console=self._console,
                rich_tracebacks=True,
                tracebacks_show_locals=False,
                show_path=False,
            )
            handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
            self._logger.addHandler(handler)
        self.set_level(level)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def set_level(self, level: str):
        self._logger.setLevel(level.upper())

    def debug(self, message: str, **meta: Any):
        self._logger.debug(_format(message, meta))

    def info(self, message: str, **meta: Any):
        self._logger.info(_format(message, meta))

    def success(self, message: str, **meta: Any):
        self._logger.success(_format(message, meta))

    def warning(self, message: str, **meta: Any):
        self._logger.warning(_format(message, meta))

    def error(self, message: str, **meta: Any):
        self._logger.error(_format(message, meta))

    def exception(self, message: str, **meta: Any):
        """Logs at ERROR level with the active exception's traceback."""
        self._logger.exception(_format(message, meta))

    def rule(self, title: str, style: str = "cyan"):
        self._console.rule(f"[bold {style}]{title}[/bold {style}]", style=style)

    def display_data_as_table(self, data: Dict[str, Any], title: str):
        """Prints settings as a two-column panel; credential-like values are masked."""
        table = Table(show_header=True, header_style="bold magenta", box=None, show_edge=False)
        table.add_column("Setting", style="cyan", no_wrap=True, width=28)
        table.add_column("Value", style="white")

        for name, value in data.items():
            value = mask_secret(name, value)
            if isinstance(value, (list, tuple)):
                value = ", ".join(map(str, value))
            table.add_row(name, str(value))

        self._console.print(Panel(table, title=f"[bold green]✓ {title}[/bold green]", border_style="green"))


console = ConsoleManager()
