"""
Transaction Export Reader

Decodes a header-driven CSV export into an ordered list of Transaction
records, one per data row, in file order.

Contract
--------
- Exactly one header row. Columns are matched by exact name, order is
  irrelevant and extra columns are ignored. Required columns:
  ``ID, COUNTERPARTY, AMOUNT, FEE, BALANCE AFTER, TRANSACTION TYPE, DATE,
  TIME, STATUS, TRANSACTION ID, NOTE``
- Quoted fields may contain the delimiter and newlines; a doubled quote is
  a literal quote.
- A file with only a header row yields an empty list.

Failure mode
------------
Reading is fail-fast. The first malformed field aborts the whole read and
its FormatError (naming the column and data row) is raised. No partial list
is ever returned.
"""

import asyncio
import csv
import io
from pathlib import Path
from typing import BinaryIO, Callable, Optional, TextIO, TypeVar, Union

import structlog

from transaction_analyzer.config import ReaderSettings, get_settings
from transaction_analyzer.exceptions import FormatError, NotFoundError, ValidationError
from transaction_analyzer.models.transaction import NIL_ID, Transaction, timestamp_in_range
from transaction_analyzer.parsing.values import (
    TIME_PATTERN,
    parse_date,
    parse_identifier,
    parse_money,
    parse_time,
)


# Export columns, in the order the bank writes them
REQUIRED_COLUMNS: tuple[str, ...] = (
    "ID",
    "COUNTERPARTY",
    "AMOUNT",
    "FEE",
    "BALANCE AFTER",
    "TRANSACTION TYPE",
    "DATE",
    "TIME",
    "STATUS",
    "TRANSACTION ID",
    "NOTE",
)

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class TransactionReader:
    """
    Reads bank transaction exports.

    File paths and open byte streams are both accepted; identical bytes
    always decode to an identical list of transactions.
    A reader instance is not meant to read one stream from two callers
    at once.
    """

    def __init__(self, settings: Optional[ReaderSettings] = None):
        self._settings = settings or get_settings().reader

    def read_transactions(self, file_path: Union[str, Path]) -> list[Transaction]:
        """
        Read all transactions from a file.

        Raises:
            ValidationError: If the path is None or blank
            NotFoundError: If the file does not exist
            FormatError: If the header or any field is malformed
        """
        if file_path is None or not str(file_path).strip():
            raise ValidationError("File path cannot be null or empty.")

        path = Path(file_path)
        if not path.is_file():
            raise NotFoundError(str(path))

        with path.open("rb") as stream:
            return self._read(stream, source=str(path))

    def read_transactions_from_stream(self, stream: BinaryIO) -> list[Transaction]:
        """
        Read all transactions from an open byte stream.

        The stream is read to the end but not closed.

        Raises:
            ValidationError: If the stream is None
            FormatError: If the header or any field is malformed
        """
        if stream is None:
            raise ValidationError("Stream cannot be null.")

        return self._read(stream, source=getattr(stream, "name", "<stream>"))

    async def read_transactions_async(
        self,
        source: Union[str, Path, BinaryIO],
    ) -> list[Transaction]:
        """Read a file path or byte stream on a worker thread."""
        if isinstance(source, (str, Path)):
            return await asyncio.to_thread(self.read_transactions, source)
        return await asyncio.to_thread(self.read_transactions_from_stream, source)

    def _read(self, stream: BinaryIO, source: str) -> list[Transaction]:
        text = io.TextIOWrapper(stream, encoding=self._settings.encoding, newline="")
        try:
            transactions = self._decode(text)
        except UnicodeDecodeError as e:
            raise FormatError(
                f"File is not valid {self._settings.encoding} text: {e.reason}",
                expected=f"{self._settings.encoding} encoded CSV",
            ) from e
        except csv.Error as e:
            raise FormatError(
                f"Malformed CSV: {e}",
                expected="comma-separated values",
            ) from e
        finally:
            # Hand the byte stream back to the caller unclosed
            text.detach()

        logger.info(
            "transactions_read",
            source=source,
            transaction_count=len(transactions),
        )
        return transactions

    def _decode(self, text: TextIO) -> list[Transaction]:
        reader = csv.DictReader(text, delimiter=self._settings.delimiter)

        headers = reader.fieldnames
        if headers is None:
            raise FormatError(
                "CSV header row missing; file may be empty.",
                value="",
                expected=", ".join(REQUIRED_COLUMNS),
            )

        missing = [column for column in REQUIRED_COLUMNS if column not in headers]
        if missing:
            raise FormatError(
                "CSV header mismatch. Missing columns: " + ", ".join(missing),
                value=", ".join(headers),
                expected=", ".join(REQUIRED_COLUMNS),
            )

        return [
            self._to_transaction(row, row_number)
            for row_number, row in enumerate(reader, start=1)
        ]

    def _to_transaction(self, row: dict[str, Optional[str]], row_number: int) -> Transaction:
        def field(column: str, parser: Callable[[str], T]) -> T:
            try:
                return parser(row.get(column) or "")
            except FormatError as e:
                raise e.at(column, row_number) from e

        def text(column: str) -> str:
            return row.get(column) or ""

        day = field("DATE", parse_date)
        offset = field("TIME", parse_time)
        if not timestamp_in_range(day, offset):
            raise FormatError(
                f"Time '{text('TIME')}' on '{text('DATE')}' is past the last representable date",
                value=text("TIME"),
                expected=TIME_PATTERN,
                column="TIME",
                row=row_number,
            )

        return Transaction(
            id=field("ID", parse_identifier) or NIL_ID,
            counterparty=text("COUNTERPARTY"),
            amount=field("AMOUNT", parse_money),
            fee=field("FEE", parse_money),
            balance_after=field("BALANCE AFTER", parse_money),
            transaction_type=text("TRANSACTION TYPE"),
            date=day,
            time=offset,
            status=text("STATUS"),
            transaction_id=field("TRANSACTION ID", parse_identifier),
            note=text("NOTE"),
        )
