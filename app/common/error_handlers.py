"""
Exception handlers translating ledger errors into JSON responses
"""
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import logging

from app.modules.ledger.exceptions import (
    LedgerError, ValidationError, OverpaymentError, NotFoundError
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI):
    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.message, "field": exc.field}
        )

    @app.exception_handler(OverpaymentError)
    async def handle_overpayment_error(request: Request, exc: OverpaymentError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": exc.message,
                "amount": float(exc.amount),
                "balance_due": float(exc.balance_due)
            }
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found_error(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": exc.message}
        )

    @app.exception_handler(LedgerError)
    async def handle_ledger_error(request: Request, exc: LedgerError):
        logger.warning(f"Unhandled ledger error on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.message}
        )
