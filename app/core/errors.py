"""
=============================================================================
PORTFOLIO CONTACT - ERROR HANDLING MODULE
=============================================================================
Contact pipeline exceptions and global exception handlers for secure,
user-friendly error responses.

Taxonomy:
- SpamDetected: the submission looks automated (honeypot / proof token)
- SubmissionInvalid: a content field failed validation
- TransportError: the mail transport call itself failed
- TransportRejected: the transport answered but accepted no recipient

The last two both surface to the submitter as one generic delivery failure.

Usage:
    # In main.py
    from app.core.errors import register_exception_handlers
    register_exception_handlers(app)
=============================================================================
"""

import logging
import traceback
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import settings

logger = logging.getLogger(__name__)


class ContactError(Exception):
    """Base class for contact pipeline failures."""


class SpamDetected(ContactError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class SubmissionInvalid(ContactError):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class TransportError(ContactError):
    def __init__(self, cause: Exception):
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.cause = cause


class TransportRejected(ContactError):
    def __init__(self, rejected: Optional[List[str]] = None):
        self.rejected = list(rejected or [])
        super().__init__(f"no recipient accepted (rejected={self.rejected})")


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all handler for unhandled exceptions.

        - Logs the full traceback for debugging
        - Returns a generic error message to prevent info leakage
        - In debug mode, includes more details
        """
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}:\n"
            f"{traceback.format_exc()}"
        )

        if settings.DEBUG:
            return JSONResponse(
                status_code=500,
                content={
                    "detail": "Internal Server Error",
                    "error_type": type(exc).__name__,
                    "message": str(exc),
                    "path": request.url.path,
                },
            )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal Server Error",
                "message": "An unexpected error occurred. Please try again later.",
            },
        )
