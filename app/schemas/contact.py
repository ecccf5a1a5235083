from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.networks import validate_email


class ContactSubmission(BaseModel):
    """Content fields of a contact form post. Values are kept verbatim."""

    name: str
    email: str
    message: str

    @field_validator("name", "message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def bare_email(cls, v: str) -> str:
        # validate_email also accepts "Name <addr>"; only a bare address passes
        _, normalized = validate_email(v)
        if normalized.lower() != v.lower():
            raise ValueError("value is not a bare email address")
        return v


@dataclass(frozen=True)
class DeliveryAttempt:
    sender: str
    recipient: str
    subject: str
    body: str
    accepted: List[str] = field(default_factory=list)


# Outcomes: exactly one per submission.


@dataclass(frozen=True)
class Delivered:
    accepted: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Spam:
    reason: str


@dataclass(frozen=True)
class ValidationFailed:
    detail: str


@dataclass(frozen=True)
class DeliveryFailed:
    # server-side only, never rendered to the submitter
    cause: str


Outcome = Union[Delivered, Spam, ValidationFailed, DeliveryFailed]


class ContactResponse(BaseModel):
    ok: bool
    reason: Optional[Literal["spam", "validation", "delivery"]] = None
    detail: Optional[str] = None


class HoneypotInputProps(BaseModel):
    name_field_name: str
    valid_from_field_name: str
    encrypted_valid_from: str
    label: str = Field(default="Please leave this field blank")
