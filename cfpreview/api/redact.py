from __future__ import annotations

import re
from typing import Iterable

REDACTED = "[REDACTED]"
BEARER = re.compile(r"(?i)Bearer\s+\S+")


def sanitize(message: str, secrets: Iterable[str] = ()) -> str:
    """Strip bearer credentials and known secret values from a message."""
    cleaned = BEARER.sub(f"Bearer {REDACTED}", message)
    for secret in secrets:
        if secret:
            cleaned = cleaned.replace(secret, REDACTED)
    return cleaned
