"""CSV reading and writing package."""

from transaction_analyzer.reader.csv_reader import REQUIRED_COLUMNS, TransactionReader
from transaction_analyzer.reader.csv_writer import TransactionWriter

__all__ = ["REQUIRED_COLUMNS", "TransactionReader", "TransactionWriter"]
