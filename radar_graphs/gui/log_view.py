from __future__ import annotations

import html
import io
import re
from contextlib import contextmanager, redirect_stderr, redirect_stdout
from dataclasses import dataclass
from typing import Dict, Iterator, List, Literal

import ipywidgets as w


Level = Literal["info", "warning", "error"]

_LEVEL_COLORS: Dict[str, str] = {
    "info": "#222222",
    "warning": "#b26a00",
    "error": "#b00020",
}

_ERROR_PREFIXES = ("ERROR:", "Error:", "Exception:", "Traceback")
_WARNING_PREFIXES = ("WARNING:", "Warning:", "CHECK:")

_TAG_RE = re.compile(r"<[^>]+>")


def classify_line(line: str) -> Level:
    """Severity from the line prefix: ERROR:/Traceback -> error, WARNING:/CHECK: -> warning."""
    s = (line or "").lstrip()
    if s.startswith(_ERROR_PREFIXES):
        return "error"
    if s.startswith(_WARNING_PREFIXES):
        return "warning"
    return "info"


@dataclass
class LogEntry:
    level: Level
    message: str
    count: int = 1

    def to_html(self) -> str:
        suffix = f" (x{self.count})" if self.count > 1 else ""
        return (
            f"<div style='color:{_LEVEL_COLORS[self.level]}; white-space:pre-wrap; "
            f"font-family:ui-monospace, Menlo, Consolas, monospace;'>"
            f"{html.escape(self.message + suffix)}</div>"
        )


class HtmlLog:
    """
    Load/diagnostic log rendered into one ``ipywidgets.HTML``.

    A single HTML widget renders the same in every notebook front-end, where
    ``Output`` capture is known to duplicate prints in some of them.

    - consecutive identical messages collapse into one row with an (xN) counter
    - only the newest ``max_entries`` rows are kept
    """

    def __init__(self, *, title: str | None = None, height_px: int = 180, max_entries: int = 1000) -> None:
        self.entries: List[LogEntry] = []
        self._height_px = int(height_px)
        self._max_entries = int(max_entries)
        self.widget = w.HTML()
        if title:
            self.panel = w.VBox([w.HTML(f"<b>{html.escape(title)}</b>"), self.widget])
        else:
            self.panel = self.widget
        self.clear()

    def clear(self) -> None:
        self.entries.clear()
        self._render()

    def info(self, message: str) -> None:
        self.add("info", message)

    def warning(self, message: str) -> None:
        self.add("warning", message)

    def error(self, message: str) -> None:
        self.add("error", message)

    def write(self, message: str) -> None:
        """Add free text (HTML tags stripped), one row per line, severity from each line's prefix."""
        plain = _TAG_RE.sub("", "" if message is None else str(message))
        for line in plain.splitlines() or [""]:
            self.add(classify_line(line), line)

    def add(self, level: Level, message: str) -> None:
        msg = "" if message is None else str(message)
        last = self.entries[-1] if self.entries else None
        if last is not None and last.level == level and last.message == msg:
            last.count += 1
        else:
            self.entries.append(LogEntry(level=level, message=msg))
            if len(self.entries) > self._max_entries:
                del self.entries[: len(self.entries) - self._max_entries]
        self._render()

    @contextmanager
    def capture(self) -> Iterator["HtmlLog"]:
        """Route everything printed inside the block into the log, classified per line."""
        buf = io.StringIO()
        try:
            with redirect_stdout(buf), redirect_stderr(buf):
                yield self
        finally:
            text = buf.getvalue()
            if text:
                self.write(text)

    def _render(self) -> None:
        inner = "".join(e.to_html() for e in self.entries) or "<div style='color:#666;'>Log is empty.</div>"
        self.widget.value = (
            f"<div style='border:1px solid #ddd; padding:8px; height:{self._height_px}px; "
            f"overflow-y:auto; background:#fff;'>{inner}</div>"
        )
