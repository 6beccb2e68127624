"""
Error taxonomy for the portfolio pipeline.

Ingestion errors are fatal to an upload and raised before any parsing starts.
Store errors are fatal to a batch and carry the underlying store message.
Row-level problems (short rows, unparsable numbers) are never raised: they are
recovered with defaults and counted in the ingestion report.
"""
from __future__ import annotations

from typing import Optional


class PortfolioError(Exception):
    """Base class for all pipeline errors."""


class IngestionError(PortfolioError):
    """The uploaded file was rejected before parsing."""


class UnsupportedFileTypeError(IngestionError):
    def __init__(self, file_name: str, content_type: Optional[str]):
        self.file_name = file_name
        self.content_type = content_type
        super().__init__(
            f"Please upload a CSV file (got '{file_name}', type {content_type or 'unknown'})"
        )


class FileTooLargeError(IngestionError):
    def __init__(self, size_bytes: int, limit_bytes: int):
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"File is {size_bytes} bytes, exceeds the {limit_bytes} byte upload limit"
        )


class FileReadError(IngestionError):
    """The file could not be read or decoded as text."""


class StoreError(PortfolioError):
    """A record-store call failed; the whole batch is considered failed."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class CustomerNotFoundError(PortfolioError):
    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer {customer_id} not found")
