"""Contract code + price parsing and the 12-month front window.

Barchart labels dated contracts as <SYM><MONTH CODE><YY> (e.g. CLZ24 = crude
December 2024) and the spot reference row as "<SYM> Cash". Prices come either
as decimals (comma or dot) or, for grains and treasuries, as whole-eighths
("435-6" = 435 + 6/8).
"""

import re
from dataclasses import dataclass
from datetime import date

from scripts.futures_curve_scraper.config import FRONT_WINDOW_MONTHS, MONTH_CODES

_MONTH_ORDER = list(MONTH_CODES)

# Leading numeric prefix; trailing markers like the settlement "s" are ignored
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class ContractParseError(ValueError):
    """A grid row that cannot be turned into a record. Callers skip the row."""


class ContractCodeError(ContractParseError):
    pass


class PriceParseError(ContractParseError):
    pass


@dataclass(frozen=True)
class ContractCode:
    raw_label: str
    symbol: str
    month_label: str
    contract_date: date | None

    @property
    def is_cash(self) -> bool:
        return self.contract_date is None


def parse_contract_code(label: str) -> ContractCode:
    """Parse 'CLZ24' or 'CL Cash' into a ContractCode.

    Raises:
        ContractCodeError: Unknown month code, short label or bad year
    """
    label = label.strip()
    if "Cash" in label:
        return ContractCode(
            raw_label=label, symbol=label[:2], month_label="", contract_date=None
        )

    if len(label) < 5:
        raise ContractCodeError(f"Contract code too short: {label!r}")

    symbol = label[:2]
    month_code = label[2]
    year_digits = label[3:5]

    if month_code not in MONTH_CODES:
        raise ContractCodeError(
            f"Unknown month code {month_code!r} in contract {label!r}"
        )
    if not year_digits.isdigit():
        raise ContractCodeError(f"Invalid year {year_digits!r} in contract {label!r}")

    year = 2000 + int(year_digits)
    month = _MONTH_ORDER.index(month_code) + 1
    return ContractCode(
        raw_label=label,
        symbol=symbol,
        month_label=f"{MONTH_CODES[month_code]} {year}",
        contract_date=date(year, month, 1),
    )


def _leading_number(pattern: re.Pattern, text: str, raw: str) -> str:
    match = pattern.match(text)
    if not match:
        raise PriceParseError(f"Unparseable price: {raw!r}")
    return match.group(1)


def parse_price(raw: str) -> float:
    """Parse a Barchart price cell.

    '123-16' → 125.0 (whole + eighths), '123,50' → 123.5, '71.23s' → 71.23,
    '2,650.5' → 2650.5.

    Raises:
        PriceParseError: No numeric value in the cell
    """
    if "-" in raw:
        whole, eighths = raw.split("-", 1)
        # '1,034-4': comma is a thousands separator
        whole = whole.replace(",", "")
        return float(_leading_number(_LEADING_FLOAT, whole, raw)) + (
            int(_leading_number(_LEADING_INT, eighths, raw)) / 8
        )
    if "." in raw:
        # '2,650.5': comma is a thousands separator
        text = raw.replace(",", "")
    else:
        text = raw.replace(",", ".", 1)
    return float(_leading_number(_LEADING_FLOAT, text, raw))


def add_months(d: date, months: int) -> date:
    """Shift a first-of-month date by whole months."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def front_window_cutoff(front: date) -> date:
    return add_months(front, FRONT_WINDOW_MONTHS)


def in_front_window(front: date, candidate: date | None) -> bool:
    """Cash rows (no date) are always kept; dated rows must sit in [front, front+11m]."""
    if candidate is None:
        return True
    return front <= candidate <= front_window_cutoff(front)
