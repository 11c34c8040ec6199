from __future__ import annotations

UNITS = ["bytes", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def size_parts(size: int, decimal_places: int = 1) -> tuple[str, str]:
    """Split *size* into a display value and a binary unit.

    The unit is the smallest one whose rounded value stays below 1000.
    """
    if size < 0:
        value, unit = size_parts(-size, decimal_places)
        return f"-{value}", unit
    value = float(size)
    unit = 0
    while round(value, decimal_places) >= 1000 and unit < len(UNITS) - 1:
        value /= 1024.0
        unit += 1
    return f"{value:,.{decimal_places}f}", UNITS[unit]


def format_size(size: int, decimal_places: int = 1, padding: int = 0) -> str:
    value, unit = size_parts(size, decimal_places)
    return f"{value.ljust(padding)} {unit}"
