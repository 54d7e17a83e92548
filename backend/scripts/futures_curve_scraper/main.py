"""CLI entry point for the Barchart futures curve scraper."""

import argparse
import logging
import os
import sys
from pathlib import Path

import sentry_sdk
from dotenv import load_dotenv
from sentry_sdk.crons import monitor

from app.core.sentry import init_sentry
from scripts.futures_curve_scraper.alerting import AlertLevel, send_alert
from scripts.futures_curve_scraper.config import (
    CREDENTIALS_ENV_VAR,
    LOG_FORMAT,
    BrowserSettings,
    RunConfig,
    ScrollStrategy,
)
from scripts.futures_curve_scraper.scraper import (
    FuturesCurveScraper,
    FuturesScraperError,
)
from scripts.futures_curve_scraper.sheets_writer import SheetsWriter, SheetsWriterError

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def load_credentials(credentials_file: str | None = None) -> str:
    """
    Load the service account JSON, from a key file when given, else from
    GOOGLE_SHEETS_SCRAPER_CREDENTIALS_JSON.

    Raises:
        RuntimeError: If credentials not found
    """
    if credentials_file:
        path = Path(credentials_file)
        if not path.is_file():
            raise RuntimeError(f"Credentials file not found: {path}")
        return path.read_text(encoding="utf-8")

    creds = os.getenv(CREDENTIALS_ENV_VAR)
    if not creds:
        raise RuntimeError(
            f"{CREDENTIALS_ENV_VAR} environment variable not set "
            "(or pass --credentials-file)."
        )
    return creds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Barchart futures curve scraper (12-month forward window per symbol)"
    )
    parser.add_argument(
        "--sheet",
        choices=["staging", "production"],
        default="staging",
        help="Target tab: 'staging' or 'production'",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Scrape and log blocks, but don't write to Sheets",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--headful",
        action="store_true",
        help="Run browser in non-headless mode (visible, for debugging)",
    )
    parser.add_argument(
        "--scroll-strategy",
        choices=[s.value for s in ScrollStrategy],
        default=ScrollStrategy.WHEEL.value,
        help="'wheel' scrolls with the mouse, 'dom' calls scrollBy() in the page",
    )
    parser.add_argument(
        "--credentials-file",
        default=None,
        help=f"Service account key file (default: ${CREDENTIALS_ENV_VAR})",
    )
    return parser


def run(config: RunConfig, credentials_json: str, dry_run: bool = False) -> int:
    """Scrape every configured symbol, then write all blocks.

    Returns:
        Exit code (0 = success)
    """
    # Sheets client first so bad credentials fail before any browser work
    writer = SheetsWriter(
        credentials_json,
        spreadsheet_id=config.spreadsheet_id,
        sheet_name=config.sheet_name,
        sheet_id=config.sheet_id,
    )

    logger.info(f"Step 1: Scraping {len(config.symbols)} symbols from Barchart...")
    with FuturesCurveScraper(config.browser) as scraper:
        result = scraper.scrape_all(config.symbols)

    logger.info(f"Step 2: Writing blocks to Google Sheets ({config.sheet_name})...")
    writer.write_all(config.symbols, result.rows_by_symbol, dry_run=dry_run)

    sentry_sdk.set_context(
        "scrape_result",
        {
            "sheet": config.sheet_name,
            "symbols": len(config.symbols),
            "rows": result.total_rows,
            "skipped": sorted(result.skipped),
            "dry_run": dry_run,
        },
    )

    summary = (
        f"{result.total_rows} rows for {len(config.symbols)} symbols "
        f"written to '{config.sheet_name}'"
    )
    if result.skipped:
        details = "\n".join(f"{s}: {reason}" for s, reason in result.skipped.items())
        send_alert(
            AlertLevel.WARNING,
            f"Futures curve: {len(result.skipped)} symbol(s) skipped",
            f"{summary}\n{details}",
        )
        sentry_sdk.capture_message(
            f"Futures curve skipped symbols: {sorted(result.skipped)}", level="warning"
        )
    else:
        send_alert(AlertLevel.SUCCESS, "Futures curve scraper OK", summary)
    return 0


# Load env + init Sentry BEFORE @monitor-decorated function
load_dotenv(Path(__file__).parent.parent.parent / ".env")
init_sentry("futures-curve-scraper")


@monitor(monitor_slug="futures-curve-scraper")
def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 = success, 1 = failure)
    """
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    strategy = ScrollStrategy(args.scroll_strategy)
    config = RunConfig.for_target(
        args.sheet,
        browser=BrowserSettings.for_strategy(strategy, headless=not args.headful),
    )

    logger.info("=" * 60)
    logger.info("Futures Curve Scraper - Barchart daily futures prices")
    logger.info(f"Mode: {'DRY RUN' if args.dry_run else 'LIVE'}")
    logger.info(f"Target: {args.sheet.upper()} ({config.sheet_name})")
    logger.info(
        f"Browser: {'HEADFUL (visible)' if args.headful else 'HEADLESS'} | "
        f"scroll={strategy.value}"
    )
    logger.info("=" * 60)

    try:
        creds = load_credentials(args.credentials_file)
        exit_code = run(config, creds, dry_run=args.dry_run)

        logger.info("=" * 60)
        logger.info("SUCCESS: Scraper completed successfully")
        logger.info("=" * 60)
        return exit_code

    except FuturesScraperError as e:
        logger.error(f"Scraper error: {e}")
        sentry_sdk.capture_exception(e)
    except SheetsWriterError as e:
        logger.error(f"Sheets writer error: {e}")
        sentry_sdk.capture_exception(e)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        sentry_sdk.capture_exception(e)

    send_alert(
        AlertLevel.CRITICAL,
        "Futures curve scraper FAILED",
        "Run aborted, see logs. Re-run all symbols.",
    )
    return 1


if __name__ == "__main__":
    sys.exit(main())
