"""Tests for contact submission classification and delivery."""
import smtplib
from unittest.mock import MagicMock

import pytest

from app.core.email import SendResult, SmtpTransport
from app.core.errors import TransportError
from app.schemas.contact import (
    Delivered,
    DeliveryFailed,
    Spam,
    ValidationFailed,
)
from app.services.contact_service import (
    ContactService,
    to_response,
)


def _service(contact_config, honeypot, transport):
    return ContactService(config=contact_config, honeypot=honeypot, transport=transport)


@pytest.mark.asyncio
async def test_valid_submission_is_delivered(service, transport, valid_form):
    outcome = await service.process(valid_form)

    assert isinstance(outcome, Delivered)
    assert outcome.accepted == ["owner+contact@example.com"]
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_delivery_uses_fixed_identities_and_raw_body(service, transport, valid_form):
    valid_form["message"] = "  line one\nline two  "

    await service.process(valid_form)

    call = transport.calls[0]
    assert call["sender"] == "Contact Me <contact@example.com>"
    assert call["to"] == "owner+contact@example.com"
    assert call["subject"] == "Message from Jane <jane@x.com>"
    assert call["body"] == "  line one\nline two  "


@pytest.mark.asyncio
async def test_bait_field_wins_over_otherwise_valid_form(service, transport, valid_form):
    valid_form["name__confirm"] = "bot"

    outcome = await service.process(valid_form)

    assert isinstance(outcome, Spam)
    assert transport.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, "", "123.abc", "1717000000000." + "f" * 64])
async def test_missing_or_invalid_token_is_spam(service, transport, valid_form, token):
    if token is None:
        del valid_form["form__confirm"]
    else:
        valid_form["form__confirm"] = token

    outcome = await service.process(valid_form)

    assert isinstance(outcome, Spam)
    assert transport.calls == []


@pytest.mark.asyncio
async def test_spam_preempts_validation(service, transport, valid_form):
    valid_form.update({"name": "", "email": "nope", "name__confirm": "bot"})

    outcome = await service.process(valid_form)

    assert isinstance(outcome, Spam)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides,detail",
    [
        ({"name": ""}, "name required"),
        ({"name": "   "}, "name required"),
        ({"name": None}, "name required"),
        ({"email": ""}, "email required"),
        ({"email": "not-an-email"}, "valid email required"),
        ({"email": "jane@x.com\r\nBcc: victim@y.com"}, "valid email required"),
        ({"email": "Jane <jane@x.com>"}, "valid email required"),
        ({"message": ""}, "message required"),
        ({"message": "\n\t "}, "message required"),
    ],
)
async def test_invalid_fields_never_reach_transport(
    service, transport, valid_form, overrides, detail
):
    for key, value in overrides.items():
        if value is None:
            del valid_form[key]
        else:
            valid_form[key] = value

    outcome = await service.process(valid_form)

    assert outcome == ValidationFailed(detail=detail)
    assert transport.calls == []


@pytest.mark.asyncio
async def test_line_breaks_in_name_do_not_reach_subject(service, transport, valid_form):
    valid_form["name"] = "Jane\r\nBcc: victim@y.com"

    outcome = await service.process(valid_form)

    assert isinstance(outcome, Delivered)
    subject = transport.calls[0]["subject"]
    assert "\r" not in subject and "\n" not in subject


@pytest.mark.asyncio
async def test_zero_accepted_recipients_is_delivery_failure(
    contact_config, honeypot, valid_form, make_transport
):
    transport = make_transport(
        result=SendResult(accepted=[], rejected=["owner+contact@example.com"])
    )

    outcome = await _service(contact_config, honeypot, transport).process(valid_form)

    assert isinstance(outcome, DeliveryFailed)
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_transport_error_is_delivery_failure_and_logged(
    contact_config, honeypot, valid_form, caplog, make_transport
):
    cause = smtplib.SMTPConnectError(421, b"smtp.test refused connection")
    transport = make_transport(error=TransportError(cause))
    caplog.set_level("INFO", logger="app.services.contact_service")

    outcome = await _service(contact_config, honeypot, transport).process(valid_form)

    assert isinstance(outcome, DeliveryFailed)
    assert "SMTPConnectError" in outcome.cause
    assert "SMTPConnectError" in caplog.text
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_unexpected_exception_is_contained(
    contact_config, honeypot, valid_form, make_transport
):
    transport = make_transport(error=KeyError("boom"))

    outcome = await _service(contact_config, honeypot, transport).process(valid_form)

    assert isinstance(outcome, DeliveryFailed)
    assert "KeyError" in outcome.cause


@pytest.mark.asyncio
async def test_transport_is_called_once_without_retry(
    contact_config, honeypot, valid_form, make_transport
):
    transport = make_transport(error=TransportError(OSError("network down")))

    await _service(contact_config, honeypot, transport).process(valid_form)

    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_redacted_logs_do_not_contain_visitor_email(service, valid_form, caplog):
    caplog.set_level("INFO", logger="app.services.contact_service")

    await service.process(valid_form)

    assert "Message sent successfully" in caplog.text
    assert "jane@x.com" not in caplog.text
    assert "j***@x.com" in caplog.text


@pytest.mark.asyncio
async def test_spam_is_logged_as_warning(service, valid_form, caplog):
    valid_form["name__confirm"] = "bot"
    caplog.set_level("INFO", logger="app.services.contact_service")

    await service.process(valid_form)

    records = [r for r in caplog.records if "SPAM ALERT" in r.getMessage()]
    assert records and records[0].levelname == "WARNING"


def test_response_mapping():
    status, body = to_response(Delivered())
    assert status == 200
    assert body.model_dump(exclude_none=True) == {"ok": True}

    status, body = to_response(Spam(reason="Honeypot input not empty"))
    assert status == 400
    assert body.model_dump(exclude_none=True) == {"ok": False, "reason": "spam"}

    status, body = to_response(ValidationFailed(detail="name required"))
    assert status == 422
    assert body.model_dump(exclude_none=True) == {
        "ok": False,
        "reason": "validation",
        "detail": "name required",
    }

    status, body = to_response(DeliveryFailed(cause="SMTPAuthenticationError: 535"))
    assert status == 503
    assert body.model_dump(exclude_none=True) == {
        "ok": False,
        "reason": "delivery",
    }


def test_unknown_outcome_is_rejected():
    with pytest.raises(TypeError):
        to_response(object())


@pytest.mark.asyncio
async def test_subject_keeps_email_as_submitted(service, transport, valid_form):
    valid_form["email"] = "Jane@X.COM"

    outcome = await service.process(valid_form)

    assert isinstance(outcome, Delivered)
    assert transport.calls[0]["subject"] == "Message from Jane <Jane@X.COM>"


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["Jane Doe", "Jane\x0bDoe", "Jane\x85Doe", "Jane\u2028Doe"])
async def test_any_line_boundary_in_name_still_delivers_over_smtp(
    contact_config, honeypot, valid_form, monkeypatch, name
):
    server = MagicMock()
    server.__enter__.return_value = server
    server.send_message.return_value = {}
    monkeypatch.setattr(
        "app.core.email.smtplib.SMTP_SSL", MagicMock(return_value=server)
    )
    valid_form["name"] = name
    service = _service(contact_config, honeypot, SmtpTransport(contact_config))

    outcome = await service.process(valid_form)

    assert outcome == Delivered(accepted=["owner+contact@example.com"])
    sent = server.send_message.call_args[0][0]
    assert sent["Subject"] == "Message from Jane Doe <jane@x.com>"
