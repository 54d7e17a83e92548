"""Barchart futures curve scraper for the commodities dashboard."""

from scripts.futures_curve_scraper.scraper import (
    FuturesCurveScraper,
    FuturesScraperError,
)
from scripts.futures_curve_scraper.sheets_writer import SheetsWriter, SheetsWriterError

__all__ = [
    "FuturesCurveScraper",
    "FuturesScraperError",
    "SheetsWriter",
    "SheetsWriterError",
]
