import hashlib
import logging
from typing import Any

# Create the library logger
logger = logging.getLogger("dynexpr")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_values(values: dict[str, Any] | None) -> str:
    """
    Redacts expression attribute values for logging.
    Hashes each value so identical values can be correlated without revealing them.
    """
    if not values:
        return "{}"
    try:
        redacted = {}
        for alias, value in values.items():
            val_str = repr(value).encode("utf-8")
            redacted[alias] = hashlib.sha256(val_str).hexdigest()[:8]
        return str(redacted)
    except Exception:
        return "<redaction_failed>"
