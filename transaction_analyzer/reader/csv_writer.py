"""
Transaction Export Writer

Writes transactions back out in the export format the reader accepts:
the canonical header row, then one row per transaction using the field
formatters (money "100.50 USD", date dd/MM/yyyy, time h:mm:ss AM/PM).
"""

import csv
import io
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Union

from transaction_analyzer.config import ReaderSettings, get_settings
from transaction_analyzer.exceptions import ValidationError
from transaction_analyzer.models.transaction import Transaction
from transaction_analyzer.reader.csv_reader import REQUIRED_COLUMNS


class TransactionWriter:
    """Writes transactions as CSV using the reader's encoding and delimiter."""

    def __init__(self, settings: Optional[ReaderSettings] = None):
        self._settings = settings or get_settings().reader

    def write_to_stream(
        self,
        transactions: Iterable[Transaction],
        stream: BinaryIO,
    ) -> int:
        """
        Write transactions to an open byte stream.

        The stream is flushed but not closed.

        Returns:
            Number of rows written (excluding the header)
        """
        if transactions is None:
            raise ValidationError("Transactions cannot be null.")
        if stream is None:
            raise ValidationError("Stream cannot be null.")

        text = io.TextIOWrapper(stream, encoding=self._settings.encoding, newline="")
        try:
            writer = csv.DictWriter(
                text,
                fieldnames=REQUIRED_COLUMNS,
                delimiter=self._settings.delimiter,
            )
            writer.writeheader()
            count = 0
            for transaction in transactions:
                writer.writerow(transaction.to_row())
                count += 1
            text.flush()
        finally:
            text.detach()

        return count

    def write_to_file(
        self,
        transactions: Iterable[Transaction],
        file_path: Union[str, Path],
    ) -> int:
        if file_path is None or not str(file_path).strip():
            raise ValidationError("File path cannot be null or empty.")

        with Path(file_path).open("wb") as stream:
            return self.write_to_stream(transactions, stream)

    def to_bytes(self, transactions: Iterable[Transaction]) -> bytes:
        """Render transactions as CSV bytes (e.g. for a download button)."""
        buffer = io.BytesIO()
        self.write_to_stream(transactions, buffer)
        return buffer.getvalue()
