from __future__ import annotations

import logging
import smtplib
import ssl
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import getaddresses
from typing import List, Protocol

from app.core.config import ContactConfig
from app.core.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class SendResult:
    accepted: List[str] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)


class MailTransport(Protocol):
    def send(self, sender: str, to: str, subject: str, body: str) -> SendResult:
        ...


def build_message(sender: str, to: str, subject: str, body: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body)
    return msg


class SmtpTransport:
    """SMTP client configured once at startup.

    Each send opens its own connection, so one instance can serve
    concurrent requests. Sends are never retried.
    """

    def __init__(self, config: ContactConfig):
        self.host = config.transport_host
        self.port = config.transport_port
        self.user = config.transport_user
        self.password = config.transport_pass
        self.secure = config.transport_secure
        self.timeout = config.transport_timeout

    @property
    def configured(self) -> bool:
        return bool(self.host)

    def _connect(self, context: ssl.SSLContext) -> smtplib.SMTP:
        if self.secure:
            return smtplib.SMTP_SSL(
                self.host, self.port, timeout=self.timeout, context=context
            )
        return smtplib.SMTP(self.host, self.port, timeout=self.timeout)

    def send(self, sender: str, to: str, subject: str, body: str) -> SendResult:
        if not self.host:
            raise TransportError(RuntimeError("TRANSPORT_HOST is not configured"))

        message = build_message(sender, to, subject, body)
        recipients = [addr for _, addr in getaddresses([to]) if addr]

        try:
            context = ssl.create_default_context()
            with self._connect(context) as server:
                if not self.secure:
                    server.starttls(context=context)
                if self.user and self.password:
                    server.login(self.user, self.password)
                refused = server.send_message(message)
        except smtplib.SMTPRecipientsRefused as exc:
            logger.warning("All recipients refused: %s", list(exc.recipients))
            return SendResult(accepted=[], rejected=list(exc.recipients))
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(exc) from exc

        accepted = [addr for addr in recipients if addr not in refused]
        return SendResult(accepted=accepted, rejected=list(refused))
