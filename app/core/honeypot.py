"""
=============================================================================
PORTFOLIO CONTACT - HONEYPOT MODULE
=============================================================================
Spam guard for the public contact form.

Two independent checks run over the raw form fields:
- Bait field: a hidden input that a human never fills in. Any value means
  the form was filled by a bot.
- Proof token ("valid from"): the time the form was rendered, signed with
  HONEYPOT_ENCRYPTION_SEED. It must be present, carry a valid signature and
  not lie in the future (nor be older than HONEYPOT_MAX_AGE_SECONDS when set).

Usage:
    honeypot = Honeypot(contact_config)

    # when rendering the form
    props = honeypot.get_input_props()

    # when receiving it
    honeypot.check(form_fields)  # raises SpamDetected
=============================================================================
"""

import hashlib
import hmac
import logging
import re
import time
from typing import Mapping, Optional

from app.core.config import ContactConfig
from app.core.errors import SpamDetected
from app.schemas.contact import HoneypotInputProps

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"(\d{1,16})\.([0-9a-f]{64})")

# Clock skew tolerated between the instance that rendered the form and the
# one receiving it.
FUTURE_SKEW_MS = 5_000


def _now_ms() -> int:
    return int(time.time() * 1000)


class Honeypot:
    """Issues and checks honeypot form inputs."""

    def __init__(self, config: ContactConfig):
        self.name_field_name = config.honeypot_name_field
        self.valid_from_field_name = config.honeypot_valid_from_field
        self._seed = config.honeypot_seed.encode()
        self._max_age_ms = (
            config.honeypot_max_age_seconds * 1000
            if config.honeypot_max_age_seconds is not None
            else None
        )

    def _sign(self, timestamp: str) -> str:
        return hmac.new(self._seed, timestamp.encode(), hashlib.sha256).hexdigest()

    def issue_token(self, now_ms: Optional[int] = None) -> str:
        timestamp = str(_now_ms() if now_ms is None else now_ms)
        return f"{timestamp}.{self._sign(timestamp)}"

    def get_input_props(self, now_ms: Optional[int] = None) -> HoneypotInputProps:
        return HoneypotInputProps(
            name_field_name=self.name_field_name,
            valid_from_field_name=self.valid_from_field_name,
            encrypted_valid_from=self.issue_token(now_ms),
        )

    # -------------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------------

    def bait_field_empty(self, fields: Mapping[str, str]) -> bool:
        return not fields.get(self.name_field_name)

    def token_problem(
        self, fields: Mapping[str, str], now_ms: Optional[int] = None
    ) -> Optional[str]:
        """Return why the proof token is unacceptable, or None when it is valid."""
        token = fields.get(self.valid_from_field_name)
        if not token:
            return "Missing honeypot valid from input"

        match = _TOKEN_RE.fullmatch(str(token))
        if not match:
            return "Invalid honeypot valid from input"

        timestamp, signature = match.groups()
        if not hmac.compare_digest(self._sign(timestamp), signature):
            return "Invalid honeypot valid from input"

        now = _now_ms() if now_ms is None else now_ms
        issued = int(timestamp)
        if issued > now + FUTURE_SKEW_MS:
            return "Honeypot valid from is in future"
        if self._max_age_ms is not None and now - issued > self._max_age_ms:
            return "Honeypot valid from expired"
        return None

    def token_valid(
        self, fields: Mapping[str, str], now_ms: Optional[int] = None
    ) -> bool:
        return self.token_problem(fields, now_ms) is None

    def check(self, fields: Mapping[str, str], now_ms: Optional[int] = None) -> None:
        """Raise SpamDetected if either check fails."""
        if not self.bait_field_empty(fields):
            raise SpamDetected("Honeypot input not empty")

        problem = self.token_problem(fields, now_ms)
        if problem:
            raise SpamDetected(problem)
