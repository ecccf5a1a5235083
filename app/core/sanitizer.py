import re
from typing import Dict, Mapping

MESSAGE_FIELDS = {"message"}


def redact_pii(message: str) -> str:
    """Redact personally identifiable information from log messages.

    Sanitizes emails, IPs, API keys and passwords so that visitor data
    submitted through the contact form does not end up verbatim in logs.
    """
    if not isinstance(message, str):
        return str(message)

    # Emails: user@example.com -> u***@example.com
    message = re.sub(
        r"[\w.+-]+@[\w.-]+\.\w+",
        lambda m: m.group()[0] + "***@" + m.group().split("@")[1],
        message,
    )

    # IPs (IPv4): 192.168.1.100 -> 192.168.1.***
    message = re.sub(
        r"\b(\d{1,3}\.\d{1,3}\.\d{1,3}\.)\d{1,3}\b", r"\1***", message
    )

    # Signatures and keys: long hex strings (32+ chars)
    message = re.sub(r"\b[a-fA-F0-9]{32,}\b", "[API_KEY_REDACTED]", message)

    # Password values in common patterns
    message = re.sub(
        r'(password|passwd|pwd|secret)["\']?\s*[:=]\s*["\']?[^"\'&\s]+',
        r"\1=[REDACTED]",
        message,
        flags=re.IGNORECASE,
    )

    return message


def summarize_form(fields: Mapping[str, str], policy: str = "redact") -> Dict[str, str]:
    """Render submitted form fields for a log line according to ``policy``.

    - ``drop``: keep field names only.
    - ``redact``: mask PII in values; message bodies are reduced to a length.
    - ``full``: raw values.
    """
    if policy == "full":
        return {key: str(value) for key, value in fields.items()}

    if policy == "drop":
        return {key: "[DROPPED]" for key in fields}

    summary: Dict[str, str] = {}
    for key, value in fields.items():
        text = str(value)
        if key in MESSAGE_FIELDS:
            summary[key] = f"[{len(text)} chars]"
        else:
            summary[key] = redact_pii(text)
    return summary
