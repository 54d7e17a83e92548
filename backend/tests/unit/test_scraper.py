from datetime import date
from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError

from scripts.futures_curve_scraper.config import (
    FRONT_CONTRACT_SELECTOR,
    GRID_SELECTOR,
    BrowserSettings,
    ScrollStrategy,
)
from scripts.futures_curve_scraper import scraper as scraper_module
from scripts.futures_curve_scraper.scraper import (
    FuturesCurveScraper,
    FuturesScraperError,
    RawRow,
    ScrapeResult,
    build_symbol_rows,
    clean_front_label,
    get_prices_url,
)


def test_prices_url():
    assert get_prices_url("CL") == (
        "https://www.barchart.com/futures/quotes/CL*0/futures-prices?timeFrame=daily"
    )


def test_clean_front_label():
    assert clean_front_label(" (CLZ24) ") == "CLZ24"
    assert clean_front_label(None) == ""


def test_build_rows_filters_window_and_keeps_order():
    raw = [
        RawRow("CL Cash", "70,10", "", "10/18/24"),
        RawRow("CLF24", "71.00", "300,000", "10/18/24"),
        RawRow("CLZ24", "72.50s", "90,000", "10/18/24"),
        RawRow("CLF25", "73.00", "80,000", "10/18/24"),
    ]
    rows = build_symbol_rows("CL", "CLF24", raw)

    assert [r.code.raw_label for r in rows] == ["CL Cash", "CLF24", "CLZ24"]
    assert rows[0].to_values() == ["CL Cash", "CL", "", 70.1, "", "10/18/24"]
    assert rows[2].to_values() == [
        "CLZ24",
        "CL",
        "Dec 2024",
        72.5,
        "90,000",
        "10/18/24",
    ]
    assert rows[2].code.contract_date == date(2024, 12, 1)


def test_build_rows_skips_empty_and_unparseable_rows():
    raw = [
        RawRow(""),
        RawRow("CLA24", "70.00"),
        RawRow("CLG24", "N/A"),
        RawRow("CLH24", "70.00", "10", "t"),
    ]
    rows = build_symbol_rows("CL", "CLF24", raw)
    assert [r.code.raw_label for r in rows] == ["CLH24"]


@pytest.mark.parametrize("front", ["", "CL Cash", "CLA24"])
def test_build_rows_without_front_contract_skips_symbol(front):
    assert build_symbol_rows("CL", front, [RawRow("CLF24", "1.0")]) is None


def test_scrape_result_totals():
    result = ScrapeResult(rows_by_symbol={"CL": [MagicMock(), MagicMock()], "GC": []})
    assert result.total_rows == 2


def _fake_page(cells):
    page = MagicMock()
    grid = MagicMock()
    grid.bounding_box.return_value = {"x": 0, "y": 100, "width": 800, "height": 400}
    handles = []
    for c in cells:
        handle = MagicMock()
        handle.evaluate.return_value = c
        handles.append(handle)
    grid.query_selector_all.return_value = handles
    front = MagicMock()
    front.text_content.return_value = "(GCZ24)"

    def query_selector(selector):
        return {GRID_SELECTOR: grid, FRONT_CONTRACT_SELECTOR: front}.get(selector)

    page.query_selector.side_effect = query_selector
    return page


def _cells(contract, price="2,650.0s", oi="1,000", updated="10/18/24"):
    return {
        "contract": contract,
        "price": price,
        "open_interest": oi,
        "updated": updated,
    }


def test_scrape_symbol_wheel_strategy():
    scraper = FuturesCurveScraper(BrowserSettings())
    scraper.page = _fake_page(
        [_cells("GCZ24", "2650.5"), _cells(""), _cells("GCZ25", "2700.0")]
    )

    rows = scraper.scrape_symbol("GC")

    assert [r.code.raw_label for r in rows] == ["GCZ24"]
    assert rows[0].price == 2650.5
    assert scraper.page.mouse.wheel.call_count == 20
    scraper.page.mouse.wheel.assert_called_with(0, 150)
    scraper.page.goto.assert_called_once()
    assert scraper.page.goto.call_args.kwargs["timeout"] == 60000


def test_scrape_symbol_dom_strategy_scrolls_in_page():
    scraper = FuturesCurveScraper(BrowserSettings.for_strategy(ScrollStrategy.DOM))
    scraper.page = _fake_page([_cells("GCZ24", "2650.5")])

    rows = scraper.scrape_symbol("GC")

    assert len(rows) == 1
    assert scraper.page.evaluate.call_count == 20
    assert scraper.page.evaluate.call_args.args[1] == [GRID_SELECTOR, 600]
    scraper.page.mouse.wheel.assert_not_called()


def test_scrape_symbol_navigation_failure():
    scraper = FuturesCurveScraper()
    scraper.page = MagicMock()
    scraper.page.goto.side_effect = PlaywrightError("net::ERR_TIMED_OUT")

    with pytest.raises(FuturesScraperError):
        scraper.scrape_symbol("GC")


def test_scrape_symbol_missing_grid():
    scraper = FuturesCurveScraper()
    scraper.page = MagicMock()
    scraper.page.query_selector.return_value = None

    with pytest.raises(FuturesScraperError, match="bc-data-grid"):
        scraper.scrape_symbol("GC")


def test_scrape_all_is_sequential_and_tolerates_failures(monkeypatch):
    scraper = FuturesCurveScraper()
    calls = []

    def fake_scrape_symbol(symbol):
        calls.append(symbol)
        if symbol == "CL":
            raise FuturesScraperError("grid missing")
        if symbol == "GC":
            return None
        return [MagicMock()]

    monkeypatch.setattr(scraper, "scrape_symbol", fake_scrape_symbol)
    result = scraper.scrape_all(["CC", "CL", "GC"])

    assert calls == ["CC", "CL", "GC"]
    assert result.rows_by_symbol["CL"] == []
    assert result.rows_by_symbol["GC"] == []
    assert len(result.rows_by_symbol["CC"]) == 1
    assert set(result.skipped) == {"CL", "GC"}
    assert result.total_rows == 1


def _open_scraper():
    scraper = FuturesCurveScraper()
    scraper.playwright = MagicMock()
    scraper.browser = MagicMock()
    scraper.page = MagicMock()
    return scraper


def test_close_browser_runs_every_step_when_one_fails():
    scraper = _open_scraper()
    page, browser, driver = scraper.page, scraper.browser, scraper.playwright
    page.close.side_effect = PlaywrightError(
        "Target page, context or browser has been closed"
    )
    browser.close.side_effect = PlaywrightError("Browser has been closed")

    scraper._close_browser()

    page.close.assert_called_once()
    browser.close.assert_called_once()
    driver.stop.assert_called_once()
    assert scraper.page is None and scraper.browser is None


def test_exit_releases_browser_after_mid_scrape_error(monkeypatch):
    scraper = _open_scraper()
    page, browser, driver = scraper.page, scraper.browser, scraper.playwright
    page.close.side_effect = PlaywrightError("Target crashed")
    monkeypatch.setattr(scraper, "_launch_browser", lambda: None)

    with pytest.raises(RuntimeError):
        with scraper:
            raise RuntimeError("browser crashed mid-scrape")

    page.close.assert_called_once()
    browser.close.assert_called_once()
    driver.stop.assert_called_once()


def test_launch_failure_stops_driver(monkeypatch):
    driver = MagicMock()
    driver.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")
    driver.webkit.launch.side_effect = PlaywrightError("Executable doesn't exist")
    starter = MagicMock()
    starter.start.return_value = driver
    monkeypatch.setattr(scraper_module, "sync_playwright", lambda: starter)

    with pytest.raises(PlaywrightError):
        with FuturesCurveScraper():
            pass

    driver.stop.assert_called_once()
