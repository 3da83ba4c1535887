# src/models/errors.py

"""Exception taxonomy for catalog ingestion."""


class CatalogError(Exception):
    """Base class for every ingestion failure."""


class TransportFailure(CatalogError):
    """Network error or a non-2xx HTTP status from a source."""


class InvalidPayload(CatalogError):
    """A source answered, but with an HTML page or an empty body."""


class ParseError(CatalogError):
    """A payload produced zero usable data rows."""


class RowSkipped(CatalogError):
    """A single malformed row; absorbed by the parser."""

    def __init__(self, line_number: int, reason: str) -> None:
        super().__init__(f"row {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason
