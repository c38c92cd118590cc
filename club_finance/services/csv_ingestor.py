"""
CSV ingestor — turns a raw bank-statement export into parsed rows.

Bank exports arrive as delimited text with no header:

    date (DD/MM/YYYY), amount, description...

The delimiter is either a tab or a comma and is detected from the first
non-blank line. Everything after the second field is the description
(multiple fields are joined with a single space).

Filtering rules:
  - Rows with fewer than three fields are skipped.
  - Rows whose fields are all blank are skipped.
  - Rows with an unparsable date or amount are skipped, including amounts
    too large to round to cents.
Skipping is silent (DEBUG log only). Header lines, totals and other noise
in an export simply fall out here. Only a structurally unreadable file is
an error, and so is a file that yields no rows at all.

Each row keeps its original record position (file_index) so later stages
can break same-day ties in import-file order.
"""

import csv
import io
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from club_finance.currency import round_currency
from club_finance.exceptions import AmountOutOfRangeError, EmptyImportError, ParseError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d/%m/%Y"


@dataclass
class RawRow:
    """One usable row of a bank statement, before reconciliation."""
    file_index: int
    date: date
    amount: Decimal
    description: str
    category: str | None = None


def detect_delimiter(text: str) -> str:
    """
    Pick the delimiter from the first non-blank line.

    Tabs win ties, and a line with neither character is treated as tab
    separated. Input with no non-blank line at all falls back to comma.
    """
    for line in text.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue
        tabs = trimmed.count("\t")
        commas = trimmed.count(",")
        if tabs >= commas:
            return "\t"
        return ","
    return ","


def normalize_amount(value: str) -> str:
    """Strip thousands separators and dollar signs from an amount string."""
    return value.replace(",", "").replace("$", "").strip()


def _parse_date(value: str) -> date | None:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None


def _parse_amount(value: str) -> Decimal | None:
    try:
        amount = Decimal(normalize_amount(value))
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    try:
        return round_currency(amount)
    except AmountOutOfRangeError:
        return None


def parse_rows(text: str) -> list[RawRow]:
    """
    Parse a bank statement export into rows, in file order.

    Args:
        text: The raw CSV/TSV payload.

    Returns:
        The usable rows, in the order they appear in the file.

    Raises:
        ParseError: If the csv module cannot read the payload.
        EmptyImportError: If no usable rows remain after filtering.
    """
    reader = csv.reader(io.StringIO(text), delimiter=detect_delimiter(text))

    rows: list[RawRow] = []
    skipped = 0
    try:
        for index, record in enumerate(reader):
            if len(record) < 3:
                skipped += 1
                continue

            date_raw = record[0].strip()
            amount_raw = record[1].strip()
            description = " ".join(record[2:]).strip()
            if not date_raw and not amount_raw and not description:
                skipped += 1
                continue

            parsed_date = _parse_date(date_raw)
            amount = _parse_amount(amount_raw)
            if parsed_date is None or amount is None:
                logger.debug("Skipping unparsable row %d: %r", index, record)
                skipped += 1
                continue

            rows.append(
                RawRow(
                    file_index=index,
                    date=parsed_date,
                    amount=amount,
                    description=description,
                )
            )
    except csv.Error as exc:
        raise ParseError(str(exc)) from exc

    if not rows:
        raise EmptyImportError()

    logger.debug("Parsed %d rows (%d skipped)", len(rows), skipped)
    return rows
