from __future__ import annotations

from rich.console import Console

from foldersize.models.collisions import ReportLine
from foldersize.models.duplicates import DuplicateReport
from foldersize.models.enums import LineLevel
from foldersize.models.scan import SizeEntry, SizeReport
from foldersize.services.formatting import format_size

MIN_PADDING = 50
VALUE_PADDING = 10

_LINE_STYLES: dict[LineLevel, str | None] = {
    LineLevel.INFO: None,
    LineLevel.ERROR: "red",
    LineLevel.FLAGGED: "yellow",
}


def _display_name(entry: SizeEntry, full_name: bool) -> str:
    node = entry.node
    return node.path if full_name else node.name


def _size_line(name: str, size: int, padding: int) -> str:
    return f"{name.ljust(padding)} | {format_size(size, padding=VALUE_PADDING)}"


def size_lines(report: SizeReport, *, full_name: bool = False) -> list[str]:
    """Total line, a blank line, then one line per entry, largest first."""
    entries = report.sorted_entries()
    longest = max((len(_display_name(e, full_name)) for e in entries), default=0)
    padding = max(longest + 20, MIN_PADDING)

    lines = [_size_line("total", report.total_bytes, padding), ""]
    for entry in entries:
        name = _display_name(entry, full_name) + ("/" if entry.node.is_dir else "")
        lines.append(_size_line(name, entry.size_bytes, padding))
    return lines


def duplicate_lines(report: DuplicateReport) -> list[str]:
    lines: list[str] = []
    for group in report.groups():
        lines.append("Files:")
        lines.extend(f"    {child}" for child in group.first_children)
        lines.append("Dir:")
        lines.extend(f"    {path}" for path in group.paths)
        lines.extend(["", ""])
    return lines


def dump_text(line: ReportLine) -> str:
    if line.level is LineLevel.ERROR:
        return f"[ERROR]: {line.text}"
    return line.text


def print_lines(console: Console, lines: list[str]) -> None:
    for line in lines:
        console.print(line, markup=False, highlight=False, soft_wrap=True)


def print_report_line(console: Console, line: ReportLine) -> None:
    console.print(line.text, style=_LINE_STYLES[line.level], markup=False, highlight=False, soft_wrap=True)
