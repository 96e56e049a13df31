"""
Table helpers over element handles.

Row/cell indices are 0-based; lookups return None when out of range or not
found. Text matching is case-insensitive.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ..io.driver import BrowserDriver, ElementHandle
from .locator import Locator
from .wait import Waiter

_ROW = Locator.tag("tr")
_CELL = Locator.tag("td")
_HEADER = Locator.css("thead tr th")


def row_by_index(table: ElementHandle, index: int) -> Optional[ElementHandle]:
    rows = table.find_all(_ROW)
    return rows[index] if 0 <= index < len(rows) else None


def row_containing_text(table: ElementHandle, text: str) -> Optional[ElementHandle]:
    needle = text.lower()
    for row in table.find_all(_ROW):
        if needle in row.text.lower():
            return row
    return None


def cell(table: ElementHandle, row_text: str, cell_index: int) -> Optional[ElementHandle]:
    row = row_containing_text(table, row_text)
    if row is None:
        return None
    cells = row.find_all(_CELL)
    return cells[cell_index] if 0 <= cell_index < len(cells) else None


def verify_table_headers(table: ElementHandle, expected: Sequence[str]) -> bool:
    headers = table.find_all(_HEADER)
    if len(headers) != len(expected):
        return False
    return all(h.text.strip().lower() == e.strip().lower() for h, e in zip(headers, expected))


def row_text_by_index(table: ElementHandle, index: int) -> Optional[str]:
    row = row_by_index(table, index)
    return row.text.strip() if row is not None else None


def row_text_by_keyword(table: ElementHandle, keyword: str) -> Optional[str]:
    row = row_containing_text(table, keyword)
    return row.text.strip() if row is not None else None


def cell_texts(row: ElementHandle) -> list[str]:
    return [c.text.strip() for c in row.find_all(_CELL)]


def wait_for_elements_count(
    driver: BrowserDriver, locator: Locator, expected_count: int, waiter: Waiter
) -> list[ElementHandle]:
    """Wait until exactly `expected_count` elements match `locator`."""

    def _matches() -> Optional[tuple[list[ElementHandle]]]:
        elements = driver.find_all(locator)
        # wrapped so an expected count of 0 is still a truthy result
        return (elements,) if len(elements) == expected_count else None

    (elements,) = waiter.until(_matches, f"{expected_count} elements for {locator}")
    return elements
