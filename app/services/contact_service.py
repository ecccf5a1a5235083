from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Tuple

from pydantic import ValidationError

from app.core.config import ContactConfig
from app.core.email import MailTransport
from app.core.errors import (
    SpamDetected,
    SubmissionInvalid,
    TransportError,
    TransportRejected,
)
from app.core.honeypot import Honeypot
from app.core.sanitizer import summarize_form
from app.schemas.contact import (
    ContactResponse,
    ContactSubmission,
    Delivered,
    DeliveryAttempt,
    DeliveryFailed,
    Outcome,
    Spam,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

CONTENT_FIELDS = ("name", "email", "message")


class ContactService:
    """Classifies contact form posts and forwards genuine ones by mail."""

    def __init__(
        self,
        config: ContactConfig,
        honeypot: Honeypot,
        transport: MailTransport,
    ):
        self.config = config
        self.honeypot = honeypot
        self.transport = transport

    def validate(self, fields: Mapping[str, str]) -> ContactSubmission:
        values = {key: fields.get(key) or "" for key in CONTENT_FIELDS}
        try:
            return ContactSubmission(**values)
        except ValidationError as exc:
            field = str(exc.errors()[0]["loc"][0])
            if field == "email" and values["email"].strip():
                raise SubmissionInvalid("valid email required") from exc
            raise SubmissionInvalid(f"{field} required") from exc

    def build_delivery(self, submission: ContactSubmission) -> DeliveryAttempt:
        subject = f"Message from {submission.name} <{submission.email}>"
        return DeliveryAttempt(
            sender=self.config.sender,
            recipient=self.config.recipient,
            # EmailMessage rejects any str.splitlines() boundary in a header
            subject=" ".join(subject.splitlines()),
            body=submission.message,
        )

    async def deliver(self, attempt: DeliveryAttempt) -> DeliveryAttempt:
        result = await asyncio.to_thread(
            self.transport.send,
            attempt.sender,
            attempt.recipient,
            attempt.subject,
            attempt.body,
        )
        if not result.accepted:
            raise TransportRejected(rejected=result.rejected)
        return DeliveryAttempt(
            sender=attempt.sender,
            recipient=attempt.recipient,
            subject=attempt.subject,
            body=attempt.body,
            accepted=list(result.accepted),
        )

    async def process(self, fields: Mapping[str, str]) -> Outcome:
        form_summary = summarize_form(fields, self.config.log_form_data)
        try:
            self.honeypot.check(fields)
            submission = self.validate(fields)
            delivered = await self.deliver(self.build_delivery(submission))
        except SpamDetected as exc:
            logger.warning("SPAM ALERT: %s form=%s", exc.reason, form_summary)
            return Spam(reason=exc.reason)
        except SubmissionInvalid as exc:
            logger.info("Contact submission invalid: %s form=%s", exc.detail, form_summary)
            return ValidationFailed(detail=exc.detail)
        except (TransportError, TransportRejected) as exc:
            logger.error("Error: failed to send email: %s form=%s", exc, form_summary)
            return DeliveryFailed(cause=str(exc))
        except Exception as exc:
            logger.exception("Error: unexpected failure handling contact form")
            return DeliveryFailed(cause=f"{type(exc).__name__}: {exc}")

        logger.info(
            "Message sent successfully accepted=%s form=%s",
            len(delivered.accepted),
            form_summary,
        )
        return Delivered(accepted=delivered.accepted)


def to_response(outcome: Outcome) -> Tuple[int, ContactResponse]:
    """Map an outcome to the HTTP status and body the form renders."""
    if isinstance(outcome, Delivered):
        return 200, ContactResponse(ok=True)
    if isinstance(outcome, Spam):
        return 400, ContactResponse(ok=False, reason="spam")
    if isinstance(outcome, ValidationFailed):
        return 422, ContactResponse(
            ok=False, reason="validation", detail=outcome.detail
        )
    if isinstance(outcome, DeliveryFailed):
        return 503, ContactResponse(ok=False, reason="delivery")
    raise TypeError(f"Unknown contact outcome: {outcome!r}")
