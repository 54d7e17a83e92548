"""Configuration for the Barchart futures curve scraper."""

from dataclasses import dataclass, field
from enum import Enum

# Barchart URLs
BARCHART_BASE_URL = "https://www.barchart.com/futures/quotes"

# Commodities scraped each run. List order fixes each symbol's column block.
COMMODITY_SYMBOLS: tuple[str, ...] = (
    "CC", "CL", "CT", "GC", "GF", "HE", "HG", "HO", "KC",
    "LB", "LE", "NG", "OJ", "PA", "PL", "RB", "SB", "SI",
    "ZC", "ZL", "ZM", "ZO", "ZR", "ZS", "ZW",
)  # fmt: skip

# Futures month codes in calendar order (NOT alphabetical)
MONTH_CODES: dict[str, str] = {
    "F": "Jan",
    "G": "Feb",
    "H": "Mar",
    "J": "Apr",
    "K": "May",
    "M": "Jun",
    "N": "Jul",
    "Q": "Aug",
    "U": "Sep",
    "V": "Oct",
    "X": "Nov",
    "Z": "Dec",
}

# Front contract + 11 months = 12 contract months (inclusive)
FRONT_WINDOW_MONTHS = 11

# Sheet block layout: 6 data columns + 1 gap column per symbol, rows 2-15
BLOCK_COLUMNS = 6
BLOCK_STRIDE = 7
BLOCK_FIRST_ROW = 2
BLOCK_LAST_ROW = 15
BLOCK_ROWS = 13

# insertDimension window (0-based, end exclusive) → 14 blank rows under the header
INSERT_START_INDEX = 1
INSERT_END_INDEX = 15

# Google Sheets configuration
SPREADSHEET_ID = "11bcHqLaR6Of0c-c1LzX_wCHwbA9fSXI5wgDctysV9Ss"
SHEET_NAME_PRODUCTION = "Final Dashboard"
SHEET_NAME_STAGING = "Final Dashboard STAGING"
SHEET_IDS: dict[str, int | None] = {
    SHEET_NAME_PRODUCTION: 657769042,
    SHEET_NAME_STAGING: None,  # resolved by title at runtime
}

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
CREDENTIALS_ENV_VAR = "GOOGLE_SHEETS_SCRAPER_CREDENTIALS_JSON"

# Playwright browser settings
BROWSER_TIMEOUT = 60000  # 60 seconds, navigation only
BROWSER_WAIT = 3000  # fixed settle wait after load
SCROLL_STEPS = 20
USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"

# DOM selectors (barchart.com futures-prices page)
FRONT_CONTRACT_SELECTOR = "h1.inline-block span:nth-child(2)"
GRID_SELECTOR = "bc-data-grid"
GRID_ROW_SELECTOR = "set-class.row"

# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ScrollStrategy(Enum):
    """How the lazy-rendered price grid is scrolled into view."""

    WHEEL = "wheel"  # mouse wheel over the grid centre
    DOM = "dom"  # element.scrollBy() inside the page


# Per-strategy timings: (scroll delta px, pause after scroll ms, pause after row ms)
SCROLL_TIMINGS: dict[ScrollStrategy, tuple[int, int, int]] = {
    ScrollStrategy.WHEEL: (150, 700, 1000),
    ScrollStrategy.DOM: (600, 600, 300),
}


@dataclass(frozen=True)
class BrowserSettings:
    """Browser launch + scroll behaviour for one run."""

    headless: bool = True
    scroll_strategy: ScrollStrategy = ScrollStrategy.WHEEL
    viewport: dict[str, int] | None = None
    launch_args: tuple[str, ...] = ()
    scroll_steps: int = SCROLL_STEPS

    @property
    def scroll_delta(self) -> int:
        return SCROLL_TIMINGS[self.scroll_strategy][0]

    @property
    def scroll_pause_ms(self) -> int:
        return SCROLL_TIMINGS[self.scroll_strategy][1]

    @property
    def row_pause_ms(self) -> int:
        return SCROLL_TIMINGS[self.scroll_strategy][2]

    @classmethod
    def for_strategy(
        cls, strategy: ScrollStrategy, headless: bool = True
    ) -> "BrowserSettings":
        """Defaults matching each scroll variant.

        The DOM variant runs in a fixed 1920x1080 viewport so the grid
        renders enough rows per scroll step.
        """
        if strategy is ScrollStrategy.DOM:
            return cls(
                headless=headless,
                scroll_strategy=strategy,
                viewport={"width": 1920, "height": 1080},
                launch_args=(
                    "--no-sandbox",
                    "--disable-setuid-sandbox",
                    "--window-size=1920,1080",
                ),
            )
        return cls(headless=headless, scroll_strategy=strategy)


@dataclass(frozen=True)
class RunConfig:
    """Everything one scrape-and-write run needs."""

    spreadsheet_id: str
    sheet_name: str
    sheet_id: int | None
    symbols: tuple[str, ...] = COMMODITY_SYMBOLS
    browser: BrowserSettings = field(default_factory=BrowserSettings)

    @classmethod
    def for_target(
        cls, target: str, browser: BrowserSettings | None = None
    ) -> "RunConfig":
        """Build the config for the 'staging' or 'production' sheet."""
        if target not in ("staging", "production"):
            raise ValueError(f"Unknown sheet target: {target!r}")
        sheet_name = (
            SHEET_NAME_STAGING if target == "staging" else SHEET_NAME_PRODUCTION
        )
        return cls(
            spreadsheet_id=SPREADSHEET_ID,
            sheet_name=sheet_name,
            sheet_id=SHEET_IDS.get(sheet_name),
            browser=browser or BrowserSettings(),
        )
