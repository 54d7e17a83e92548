"""Google Sheets writer for the futures curve dashboard.

Each run pushes the previous snapshots down by inserting blank rows under
the header, then overwrites one 13 x 6 block per symbol:

    A2:F15 = CC   H2:M15 = CL   O2:T15 = CT   ...
"""

import json
import logging
from typing import Iterable, Sequence

from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from scripts.futures_curve_scraper.config import (
    BLOCK_ROWS,
    INSERT_END_INDEX,
    INSERT_START_INDEX,
    SCOPES,
)
from scripts.futures_curve_scraper.layout import a1_range, column_range_for, pad_block
from scripts.futures_curve_scraper.scraper import CurveRow

logger = logging.getLogger(__name__)


class SheetsWriterError(Exception):
    """Base exception for Sheets writer errors."""

    pass


class SheetsWriter:
    """Writes per-symbol curve blocks to the dashboard tab."""

    def __init__(
        self,
        credentials_json: str,
        spreadsheet_id: str,
        sheet_name: str,
        sheet_id: int | None = None,
    ):
        """
        Initialize Sheets writer.

        Args:
            credentials_json: JSON string of service account credentials
            spreadsheet_id: Target spreadsheet
            sheet_name: Tab title used in A1 ranges
            sheet_id: Numeric tab id (gid); looked up by title when None

        Raises:
            SheetsWriterError: If initialization fails
        """
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self.sheet_id = sheet_id
        try:
            creds_dict = json.loads(credentials_json)
            self.credentials = Credentials.from_service_account_info(
                creds_dict, scopes=SCOPES
            )
            self.service = build("sheets", "v4", credentials=self.credentials)
            logger.info(f"Google Sheets API client initialized for '{sheet_name}'")
        except json.JSONDecodeError as e:
            raise SheetsWriterError(f"Invalid credentials JSON: {e}") from e
        except Exception as e:
            raise SheetsWriterError(f"Failed to initialize Sheets client: {e}") from e

    def resolve_sheet_id(self) -> int:
        """Return the tab's numeric id, looking it up by title if needed."""
        if self.sheet_id is not None:
            return self.sheet_id

        try:
            info = (
                self.service.spreadsheets()
                .get(
                    spreadsheetId=self.spreadsheet_id,
                    fields="sheets.properties(sheetId,title)",
                )
                .execute()
            )
        except HttpError as e:
            raise SheetsWriterError(f"Failed to read spreadsheet metadata: {e}") from e

        for sheet in info.get("sheets", []):
            props = sheet.get("properties", {})
            if props.get("title") == self.sheet_name:
                self.sheet_id = props["sheetId"]
                logger.debug(f"Resolved '{self.sheet_name}' → sheetId {self.sheet_id}")
                return self.sheet_id

        raise SheetsWriterError(f"Sheet '{self.sheet_name}' not found in spreadsheet")

    def insert_blank_rows(self, dry_run: bool = False) -> None:
        """Insert blank rows at the top (below the header) for the new snapshot."""
        count = INSERT_END_INDEX - INSERT_START_INDEX
        if dry_run:
            logger.info(f"[DRY RUN] Would insert {count} rows into '{self.sheet_name}'")
            return

        request = {
            "insertDimension": {
                "range": {
                    "sheetId": self.resolve_sheet_id(),
                    "dimension": "ROWS",
                    "startIndex": INSERT_START_INDEX,
                    "endIndex": INSERT_END_INDEX,
                },
                "inheritFromBefore": False,
            }
        }
        try:
            self.service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"requests": [request]},
            ).execute()
        except HttpError as e:
            raise SheetsWriterError(
                f"Failed to insert rows into '{self.sheet_name}': {e}"
            ) from e
        logger.info(f"Inserted {count} blank rows into '{self.sheet_name}'")

    def write_block(
        self,
        index: int,
        symbol: str,
        rows: Sequence[CurveRow],
        dry_run: bool = False,
    ) -> str:
        """Overwrite one symbol's block, padded to 13 rows.

        Returns:
            A1 range written (e.g. "'Final Dashboard'!H2:M15")
        """
        if len(rows) > BLOCK_ROWS:
            logger.warning(
                f"{symbol}: {len(rows)} rows exceed block height, "
                f"keeping first {BLOCK_ROWS}"
            )
        values = pad_block([row.to_values() for row in rows])
        range_name = a1_range(self.sheet_name, column_range_for(index))

        if dry_run:
            logger.info(f"[DRY RUN] Would write {symbol} ({len(rows)} rows) to {range_name}")
            for row in values[: len(rows)]:
                logger.debug(f"  {row}")
            return range_name

        try:
            self.service.spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=range_name,
                valueInputOption="USER_ENTERED",
                body={"values": values},
            ).execute()
        except HttpError as e:
            raise SheetsWriterError(f"Failed to write {symbol} to {range_name}: {e}") from e

        logger.info(f"Wrote {symbol}: {len(rows)} row(s) → {range_name}")
        return range_name

    def write_all(
        self,
        symbols: Iterable[str],
        rows_by_symbol: dict[str, list[CurveRow]],
        dry_run: bool = False,
    ) -> list[str]:
        """Insert rows once, then write every symbol's block in list order.

        Symbols without data still get an all-blank block. Blocks already
        written are not rolled back if a later one fails.
        """
        self.insert_blank_rows(dry_run=dry_run)
        return [
            self.write_block(index, symbol, rows_by_symbol.get(symbol, []), dry_run)
            for index, symbol in enumerate(symbols)
        ]
