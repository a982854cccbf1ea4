"""Snapshot diff rendering - line-oriented differences in two styles."""

import difflib
import html
from enum import Enum
from typing import List, Union

from .errors import ConfigError
from .snapshot import Snapshot


class DiffStyle(str, Enum):
    """Rendering format of a snapshot difference."""

    UNIFIED = "UNIFIED"
    HTML = "HTML"


_FILE_TYPES = {
    DiffStyle.UNIFIED: ".txt",
    DiffStyle.HTML: ".html",
}

NO_NEWLINE_MARKER = "\\ No newline at end of file"

_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
table.diff {{ font-family: monospace; border-collapse: collapse; }}
tr.hdr td {{ font-weight: bold; }}
tr.hunk td {{ color: #6f42c1; background: #f1f8ff; }}
tr.add td {{ background: #e6ffed; }}
tr.del td {{ background: #ffeef0; }}
td {{ white-space: pre; padding: 0 4px; }}
</style>
</head>
<body>
<h1>{title}</h1>
{summary}<table class="diff">
{rows}</table>
</body>
</html>
"""


def _line_class(line: str) -> str:
    if line.startswith(("---", "+++")):
        return "hdr"
    if line.startswith("@@"):
        return "hunk"
    if line.startswith("+"):
        return "add"
    if line.startswith("-"):
        return "del"
    return "ctx"


def _html_cell(line: str) -> str:
    # Carriage returns would be invisible in a browser, show them as U+240D
    return html.escape(line).replace("\r", "&#9229;")


def _split_lines(text: str) -> List[str]:
    """Split on LF only, keeping the terminator on every terminated line."""
    lines = [line + "\n" for line in text.split("\n")]
    last = lines.pop()[:-1]
    if last:
        lines.append(last)
    return lines


class SnapshotComparator:
    """Computes the textual difference between two snapshots."""

    def __init__(self, style: Union[DiffStyle, str] = DiffStyle.UNIFIED):
        """
        Args:
            style: ``UNIFIED`` or ``HTML`` (strings are case-insensitive)

        Raises:
            ConfigError: If the style is not supported
        """
        try:
            self.style = DiffStyle(style.upper() if isinstance(style, str) else style)
        except ValueError:
            supported = ", ".join(s.value for s in DiffStyle)
            raise ConfigError(f"Unsupported diff style {style!r} (expected one of: {supported})")

    @property
    def file_type(self) -> str:
        """File extension matching the rendered diff, including the dot."""
        return _FILE_TYPES[self.style]

    def diff(self, previous: Snapshot, current: Snapshot) -> str:
        """
        Render the difference between two snapshots.

        Args:
            previous: Older snapshot
            current: Newer snapshot

        Returns:
            Unified diff text, or an HTML document, depending on the style.
            Identical payloads give an empty unified diff.
        """
        lines = self._unified_lines(previous, current)
        if self.style == DiffStyle.HTML:
            return self._render_html(lines, previous, current)
        return "\n".join(lines) + "\n" if lines else ""

    @staticmethod
    def _unified_lines(previous: Snapshot, current: Snapshot) -> List[str]:
        # Lines are compared with their terminators, so payloads differing
        # only in line endings still produce a diff.
        diff = difflib.unified_diff(
            _split_lines(previous.payload),
            _split_lines(current.payload),
            fromfile=f"registry {previous.captured_at_iso}",
            tofile=f"registry {current.captured_at_iso}",
            lineterm="",
        )
        lines = []
        for index, line in enumerate(diff):
            if index < 2 or line.startswith("@@"):
                lines.append(line)
            elif line.endswith("\n"):
                lines.append(line[:-1])
            else:
                lines.append(line)
                lines.append(NO_NEWLINE_MARKER)
        return lines

    @staticmethod
    def _render_html(lines: List[str], previous: Snapshot, current: Snapshot) -> str:
        title = html.escape(
            f"Registry changes {previous.captured_at_iso} .. {current.captured_at_iso}"
        )
        rows = "".join(
            f'<tr class="{_line_class(line)}"><td>{_html_cell(line)}</td></tr>\n'
            for line in lines
        )
        summary = "" if lines else "<p>No differences.</p>\n"
        return _HTML_TEMPLATE.format(title=title, summary=summary, rows=rows)
