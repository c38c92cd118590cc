"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain-specific errors (like EmptyImportError)
without importing HTTP concepts. The handlers registered here translate
them into HTTP responses with a consistent JSON body:
    {"detail": "error message", "error_type": "..."}

Exception hierarchy:
    ClubFinanceError (base)
    ├── ParseError                — CSV payload is structurally unreadable
    ├── EmptyImportError          — no usable rows left after filtering
    ├── LedgerValidationError     — missing or malformed request input
    ├── AmountOutOfRangeError     — amount too large to hold in whole cents
    ├── InvalidPeriodError        — unknown report period key
    ├── InvalidLedgerFormatError  — stored document does not decode
    └── StoreError                — document store failure
        └── DocumentNotFoundError — requested document does not exist

None of these are retried anywhere. A failure aborts the request that
raised it and is surfaced to the caller.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class ClubFinanceError(Exception):
    """Base exception for all Club Finance domain errors."""

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Import errors
# ---------------------------------------------------------------------------

class ParseError(ClubFinanceError):
    """Raised when the imported CSV cannot be read at all."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"invalid csv: {reason}")


class EmptyImportError(ClubFinanceError):
    """Raised when filtering leaves zero usable rows in an import."""

    def __init__(self):
        super().__init__("no transactions found")


class LedgerValidationError(ClubFinanceError):
    """Raised when required input (type, balance, month) is missing or malformed."""


class AmountOutOfRangeError(ClubFinanceError, ValueError):
    """
    Raised when an amount cannot be rounded to cents at Decimal precision.

    Also a ValueError, so pydantic validators that round money report it
    as an ordinary validation failure.
    """

    def __init__(self, value):
        self.value = value
        super().__init__(f"Amount out of range: {value}")


# ---------------------------------------------------------------------------
# Report errors
# ---------------------------------------------------------------------------

class InvalidPeriodError(ClubFinanceError):
    """Raised when a report is requested for an unknown period key."""

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Invalid period: {period!r}")


# ---------------------------------------------------------------------------
# Storage errors
# ---------------------------------------------------------------------------

class StoreError(ClubFinanceError):
    """Raised when the document store fails for any reason other than a missing key."""


class DocumentNotFoundError(StoreError):
    """Raised when a document key does not exist in the store."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Document {key} not found")


class InvalidLedgerFormatError(ClubFinanceError):
    """Raised when a stored document cannot be decoded as the expected type."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Invalid ledger format: {key}")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Each handler maps a domain exception to an HTTP status code and the
    consistent JSON response format: {"detail": ..., "error_type": ...}

    This is called once during app construction in main.py.
    """

    @app.exception_handler(ParseError)
    async def parse_error_handler(request: Request, exc: ParseError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": exc.detail, "error_type": "parse_error"},
        )

    @app.exception_handler(EmptyImportError)
    async def empty_import_handler(request: Request, exc: EmptyImportError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": exc.detail, "error_type": "empty_import"},
        )

    @app.exception_handler(LedgerValidationError)
    async def validation_error_handler(
        request: Request, exc: LedgerValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": exc.detail, "error_type": "validation_error"},
        )

    @app.exception_handler(AmountOutOfRangeError)
    async def amount_out_of_range_handler(
        request: Request, exc: AmountOutOfRangeError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": exc.detail, "error_type": "amount_out_of_range"},
        )

    @app.exception_handler(InvalidPeriodError)
    async def invalid_period_handler(request: Request, exc: InvalidPeriodError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": exc.detail, "error_type": "invalid_period"},
        )

    @app.exception_handler(InvalidLedgerFormatError)
    async def invalid_ledger_format_handler(
        request: Request, exc: InvalidLedgerFormatError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": exc.detail, "error_type": "invalid_ledger_format"},
        )

    @app.exception_handler(DocumentNotFoundError)
    async def not_found_handler(request: Request, exc: DocumentNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": exc.detail, "error_type": "not_found"},
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        return JSONResponse(
            status_code=500,  # Storage failure, not something the caller can fix
            content={"detail": exc.detail, "error_type": "store_error"},
        )
