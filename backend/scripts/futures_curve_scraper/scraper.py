"""Barchart.com futures-prices scraper.

The daily futures table is a <bc-data-grid> custom element that renders rows
lazily inside its shadow root, and every cell value sits in yet another
shadow root (<text-binding>). The page is therefore scrolled a fixed number
of steps before rows are read. Playwright CSS selectors pierce open shadow
roots, so only the innermost text-binding read needs page-side JS.

Turning raw cell text into records (build_symbol_rows) needs no browser.
"""

import logging
import platform
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from scripts.futures_curve_scraper.config import (
    BARCHART_BASE_URL,
    BROWSER_TIMEOUT,
    BROWSER_WAIT,
    FRONT_CONTRACT_SELECTOR,
    GRID_ROW_SELECTOR,
    GRID_SELECTOR,
    USER_AGENT,
    BrowserSettings,
    ScrollStrategy,
)
from scripts.futures_curve_scraper.contracts import (
    ContractCode,
    ContractCodeError,
    ContractParseError,
    in_front_window,
    parse_contract_code,
    parse_price,
)

logger = logging.getLogger(__name__)


class FuturesScraperError(Exception):
    pass


# Reads every cell of one grid row from its text-binding shadow root
_ROW_CELLS_JS = """
(row) => {
  const read = (cls) => {
    const cell = row.querySelector(`div.${cls} text-binding`);
    return cell && cell.shadowRoot ? cell.shadowRoot.textContent.trim() : "";
  };
  return {
    contract: read("contractSymbol"),
    price: read("dailyLastPrice"),
    open_interest: read("dailyOpenInterest"),
    updated: read("dailyDate1dAgo"),
  };
}
"""

_DOM_SCROLL_JS = """
([selector, delta]) => {
  const el = document.querySelector(selector);
  if (el) el.scrollBy(0, delta);
}
"""


def get_prices_url(symbol: str) -> str:
    """Daily futures-prices page for a symbol's continuous (*0) root."""
    return f"{BARCHART_BASE_URL}/{symbol}*0/futures-prices?timeFrame=daily"


@dataclass
class RawRow:
    """Cell text of one grid row, as rendered."""

    contract: str
    price: str = ""
    open_interest: str = ""
    updated: str = ""


@dataclass
class CurveRow:
    code: ContractCode
    price: float
    open_interest: str
    updated: str

    def to_values(self) -> list:
        """Block columns: CONTRACT | SYMBOL | MONTH | LAST | OPEN INT | DATE."""
        return [
            self.code.raw_label,
            self.code.symbol,
            self.code.month_label,
            self.price,
            self.open_interest,
            self.updated,
        ]


@dataclass
class ScrapeResult:
    rows_by_symbol: dict[str, list[CurveRow]] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)

    @property
    def total_rows(self) -> int:
        return sum(len(rows) for rows in self.rows_by_symbol.values())


def clean_front_label(text: str | None) -> str:
    """'(CLZ24)' → 'CLZ24'."""
    if not text:
        return ""
    return text.replace("(", "").replace(")", "").strip()


def build_symbol_rows(
    symbol: str, front_label: str, raw_rows: Iterable[RawRow]
) -> list[CurveRow] | None:
    """Parse + window-filter one symbol's grid rows, keeping page order.

    Returns:
        Retained rows, or None when the front contract can't be determined
        (the symbol is then skipped for this run)
    """
    if not front_label:
        logger.warning(f"{symbol}: front contract label not found")
        return None
    try:
        front = parse_contract_code(front_label)
    except ContractCodeError as e:
        logger.warning(f"{symbol}: cannot parse front contract: {e}")
        return None
    if front.is_cash:
        logger.warning(f"{symbol}: front contract {front_label!r} has no month")
        return None

    rows: list[CurveRow] = []
    for raw in raw_rows:
        if not raw.contract:
            continue
        try:
            code = parse_contract_code(raw.contract)
            if not in_front_window(front.contract_date, code.contract_date):
                logger.debug(f"{symbol}: {code.raw_label} outside window")
                continue
            price = parse_price(raw.price)
        except ContractParseError as e:
            logger.warning(f"{symbol}: skipping row {raw.contract!r}: {e}")
            continue
        rows.append(
            CurveRow(
                code=code,
                price=price,
                open_interest=raw.open_interest,
                updated=raw.updated,
            )
        )

    logger.info(f"{symbol}: {len(rows)} row(s) kept (front {front_label})")
    return rows


class FuturesCurveScraper:
    """Playwright scraper for Barchart's daily futures-prices grid."""

    def __init__(self, settings: BrowserSettings | None = None):
        self.settings = settings or BrowserSettings()
        self.playwright = None
        self.browser = None
        self.page = None

    def __enter__(self):
        self._launch_browser()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._close_browser()

    def _launch_browser(self):
        logger.info("Launching Playwright browser...")
        self.playwright = sync_playwright().start()
        try:
            if platform.system() == "Darwin":
                self.browser = self.playwright.webkit.launch(
                    headless=self.settings.headless
                )
            else:
                self.browser = self.playwright.chromium.launch(
                    headless=self.settings.headless,
                    args=list(self.settings.launch_args),
                )
            if self.settings.viewport:
                self.page = self.browser.new_page(viewport=self.settings.viewport)
            else:
                self.page = self.browser.new_page()
            self.page.set_extra_http_headers({"User-Agent": USER_AGENT})
        except Exception:
            # __exit__ never runs when __enter__ raises
            self._close_browser()
            raise
        logger.info(
            f"Browser launched (headless={self.settings.headless}, "
            f"scroll={self.settings.scroll_strategy.value})"
        )

    def _close_browser(self):
        """Release page, browser and driver; each step runs even if one fails."""
        for name, method in (("page", "close"), ("browser", "close"), ("playwright", "stop")):
            resource = getattr(self, name)
            if resource is None:
                continue
            try:
                getattr(resource, method)()
            except PlaywrightError as e:
                logger.warning(f"Failed to close {name}: {e}")
            finally:
                setattr(self, name, None)
        logger.info("Browser closed")

    # ------------------------------------------------------------------
    # Page interaction
    # ------------------------------------------------------------------

    def _open(self, url: str) -> None:
        try:
            logger.info(f"Fetching {url}")
            self.page.goto(url, wait_until="load", timeout=BROWSER_TIMEOUT)
            # Barchart never reaches networkidle (ad/analytics polling)
            self.page.wait_for_timeout(BROWSER_WAIT)
        except PlaywrightError as e:
            raise FuturesScraperError(f"Failed to fetch {url}: {e}") from e

    def _scroll_grid(self) -> None:
        """Scroll the grid so lazily-rendered rows get attached."""
        grid = self.page.query_selector(GRID_SELECTOR)
        if grid is None:
            raise FuturesScraperError(f"<{GRID_SELECTOR}> not found on page")

        settings = self.settings
        if settings.scroll_strategy is ScrollStrategy.WHEEL:
            box = grid.bounding_box()
            if box is None:
                raise FuturesScraperError(f"<{GRID_SELECTOR}> is not visible")
            center_x = box["x"] + box["width"] / 2
            center_y = box["y"] + box["height"] / 2
            for _ in range(settings.scroll_steps):
                self.page.mouse.move(center_x, center_y)
                self.page.mouse.wheel(0, settings.scroll_delta)
                self.page.wait_for_timeout(settings.scroll_pause_ms)
        else:
            for _ in range(settings.scroll_steps):
                self.page.evaluate(
                    _DOM_SCROLL_JS, [GRID_SELECTOR, settings.scroll_delta]
                )
                self.page.wait_for_timeout(settings.scroll_pause_ms)

    def read_front_label(self) -> str:
        element = self.page.query_selector(FRONT_CONTRACT_SELECTOR)
        if element is None:
            return ""
        return clean_front_label(element.text_content())

    def iter_raw_rows(self) -> Iterator[RawRow]:
        """Yield grid rows lazily, pausing after each rendered row."""
        grid = self.page.query_selector(GRID_SELECTOR)
        if grid is None:
            raise FuturesScraperError(f"<{GRID_SELECTOR}> not found on page")

        handles = grid.query_selector_all(GRID_ROW_SELECTOR)
        logger.debug(f"{len(handles)} grid row(s) rendered")
        for handle in handles:
            cells = handle.evaluate(_ROW_CELLS_JS)
            if not cells.get("contract"):
                continue
            yield RawRow(**cells)
            self.page.wait_for_timeout(self.settings.row_pause_ms)

    # ------------------------------------------------------------------
    # Public scrape methods
    # ------------------------------------------------------------------

    def scrape_symbol(self, symbol: str) -> list[CurveRow] | None:
        """Scrape one symbol's curve.

        Returns:
            Retained rows, or None if the front contract is unknown

        Raises:
            FuturesScraperError: Navigation failed or the grid is missing
        """
        self._open(get_prices_url(symbol))
        try:
            self._scroll_grid()
            front_label = self.read_front_label()
            return build_symbol_rows(symbol, front_label, self.iter_raw_rows())
        except PlaywrightError as e:
            raise FuturesScraperError(f"{symbol}: extraction failed: {e}") from e

    def scrape_all(self, symbols: Iterable[str]) -> ScrapeResult:
        """Scrape symbols one after another.

        A symbol that fails or has no front contract gets an empty row list
        and an entry in result.skipped; the run carries on.
        """
        result = ScrapeResult()
        for symbol in symbols:
            try:
                rows = self.scrape_symbol(symbol)
            except FuturesScraperError as e:
                logger.warning(f"Skipping {symbol}: {e}")
                result.rows_by_symbol[symbol] = []
                result.skipped[symbol] = str(e)
                continue

            if rows is None:
                result.rows_by_symbol[symbol] = []
                result.skipped[symbol] = "front contract not determined"
            else:
                result.rows_by_symbol[symbol] = rows

        logger.info(
            f"Scrape complete: {result.total_rows} row(s) across "
            f"{len(result.rows_by_symbol)} symbol(s), {len(result.skipped)} skipped"
        )
        return result
