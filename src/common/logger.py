import logging
import os
import sys
import time

import colorlog
from rich.console import Console
from rich.table import Table


if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")

console = Console(force_terminal=True, legacy_windows=False)

LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


class Logger:
    def __init__(self, level: str | None = None):
        self.status = None
        self.start_time = None
        self.level = LEVELS.get((level or os.getenv("LOG_LEVEL", "INFO")).upper(), 20)
        self._setup_standard_logging()

    def _setup_standard_logging(self):
        """Route stdlib logging (aiohttp, openai, anthropic) through colorlog"""
        if not logging.getLogger().handlers:
            handler = colorlog.StreamHandler()
            handler.setFormatter(
                colorlog.ColoredFormatter(
                    "%(log_color)s%(levelname)-8s%(reset)s %(blue)s%(name)s%(reset)s: %(message)s",
                )
            )
            logging.basicConfig(level=max(self.level, logging.WARNING), handlers=[handler])

    def set_level(self, level: str):
        self.level = LEVELS.get(level.upper(), 20)

    def _style(self, text: str, elapsed: str | None, status: str | None) -> tuple[str, str]:
        colour = {"success": "green", "fail": "red", "warning": "yellow"}.get(status, "blue")
        elapsed_str = f"[{colour}]{elapsed:>8}[/]" if elapsed else ""
        return f"[bold {colour}]{text}[/]", elapsed_str

    def _mark(self, status: str | None) -> str:
        if status == "success":
            return "[bold green]✔[/]"
        if status == "fail":
            return "[bold red]✖[/]"
        if status == "warning":
            return "[bold yellow]⚠[/]"
        return "[bold blue]ℹ[/]"

    def _print(self, text: str, elapsed: str | None = None, status: str | None = None):
        text, elapsed_str = self._style(text, elapsed, status)
        table = Table.grid(expand=True)
        table.add_column(justify="left", ratio=3, no_wrap=False)
        table.add_column(justify="right", width=10, no_wrap=True)
        table.add_row(text, elapsed_str)
        console.print(table)

    def _stop_status(self) -> str | None:
        elapsed = None
        if self.start_time is not None:
            elapsed = f"{time.monotonic() - self.start_time:.2f}s"
            self.start_time = None
        if self.status:
            self.status.__exit__(None, None, None)
            self.status = None
        return elapsed

    def start(self, text):
        self._stop_status()
        self.start_time = time.monotonic()
        self.status = console.status(text)
        self.status.__enter__()

    def succeed(self, text):
        elapsed = self._stop_status()
        self._print(f"{self._mark('success')} {text}", elapsed, "success")

    def fail(self, text):
        elapsed = self._stop_status()
        self._print(f"{self._mark('fail')} {text}", elapsed, "fail")

    def error(self, text):
        """Alias for fail()"""
        self.fail(text)

    def warning(self, text):
        if self.level <= LEVELS["WARNING"]:
            self._print(f"{self._mark('warning')} {text}", status="warning")

    def info(self, text):
        if self.level <= LEVELS["INFO"]:
            self._print(f"{self._mark(None)} {text}")

    def debug(self, text):
        if self.level <= LEVELS["DEBUG"]:
            console.print(f"[dim]🐛 {text}[/]")

    def progress(self, done: int, total: int, text: str = ""):
        """Batch counter line, e.g. `[2/5] Floral Midi Dress`"""
        self._print(f"[bold]\\[{done}/{total}][/] {text}".rstrip())

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._stop_status()


logger = Logger()
