"""
Contact form endpoints.

- GET  /contact/form: honeypot input names and a fresh proof token, embedded
  by the page each time it renders the form.
- POST /contact: receives the form post and returns its classified outcome.
"""
from __future__ import annotations

import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from app.core.honeypot import Honeypot
from app.schemas.contact import ContactResponse, DeliveryFailed, HoneypotInputProps
from app.services.contact_service import ContactService, to_response

logger = logging.getLogger(__name__)

router = APIRouter()


def get_contact_service(request: Request) -> ContactService:
    """Return the contact service built at startup."""
    return request.app.state.contact_service


def get_honeypot(request: Request) -> Honeypot:
    return request.app.state.honeypot


@router.get(
    "/contact/form",
    response_model=HoneypotInputProps,
    summary="Honeypot inputs for the contact form",
)
async def contact_form_inputs(
    honeypot: Honeypot = Depends(get_honeypot),
) -> HoneypotInputProps:
    return honeypot.get_input_props()


@router.post(
    "/contact",
    response_model=ContactResponse,
    response_model_exclude_none=True,
    summary="Send a message to the site owner",
    responses={
        400: {"model": ContactResponse, "description": "Rejected as automated"},
        422: {"model": ContactResponse, "description": "Malformed input"},
        503: {"model": ContactResponse, "description": "Mail delivery failed"},
    },
)
async def submit_contact(
    request: Request,
    service: ContactService = Depends(get_contact_service),
) -> JSONResponse:
    fields: Dict[str, str] = {}
    try:
        form = await request.form()
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                continue
            fields.setdefault(key, value)
    except Exception as exc:
        logger.error("Error: contact form body could not be parsed: %s", exc)
        outcome = DeliveryFailed(cause=f"{type(exc).__name__}: {exc}")
    else:
        outcome = await service.process(fields)

    status_code, body = to_response(outcome)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )
