"""Column block layout of the dashboard sheet.

Each symbol owns a 6-column block followed by one empty gap column:

    index 0 → A2:F15   index 1 → H2:M15   index 3 → V2:AA15 ...
"""

from scripts.futures_curve_scraper.config import (
    BLOCK_COLUMNS,
    BLOCK_FIRST_ROW,
    BLOCK_LAST_ROW,
    BLOCK_ROWS,
    BLOCK_STRIDE,
)

EMPTY_ROW: tuple[str, ...] = ("",) * BLOCK_COLUMNS


def column_name(n: int) -> str:
    """1-based column number → sheet letters (1=A, 26=Z, 27=AA)."""
    name = ""
    while n > 0:
        n, remainder = divmod(n - 1, 26)
        name = chr(65 + remainder) + name
    return name


def column_range_for(index: int) -> str:
    start = index * BLOCK_STRIDE
    first = column_name(start + 1)
    last = column_name(start + BLOCK_COLUMNS)
    return f"{first}{BLOCK_FIRST_ROW}:{last}{BLOCK_LAST_ROW}"


def a1_range(sheet_name: str, cell_range: str) -> str:
    quoted = sheet_name.replace("'", "''")
    return f"'{quoted}'!{cell_range}"


def pad_block(rows: list[list]) -> list[list]:
    """Return exactly BLOCK_ROWS rows: extra rows dropped, blanks appended."""
    block = [list(row) for row in rows[:BLOCK_ROWS]]
    block.extend(list(EMPTY_ROW) for _ in range(BLOCK_ROWS - len(block)))
    return block
