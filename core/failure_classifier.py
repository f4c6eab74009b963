"""
Failure Classification

Classifies reasoning-engine failures so callers can choose a retry policy.
The router itself never retries.
"""

from enum import Enum
from typing import Optional

import openai

from infra.logger import logger_classifier


# ═══════════════════════════════════════════════════════════════════════════════
# FAILURE CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════════════════

class FailureType(Enum):
    """
    Types of engine failures and the caller's sensible response.

    TRANSIENT: Temporary issues (network, timeouts, rate limits) → Caller may retry
    STRUCTURAL: Bad request or unexpected response shape → Fix the call, don't retry
    TERMINAL: Permanent issues (auth, permissions) → Stop and surface
    """
    TRANSIENT = "transient"
    STRUCTURAL = "structural"
    TERMINAL = "terminal"


_TRANSIENT_ERRORS = (
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)

_TERMINAL_ERRORS = (
    openai.AuthenticationError,
    openai.PermissionDeniedError,
)


def classify_failure(
    *,
    error: Optional[BaseException] = None,
    message: Optional[str] = None
) -> FailureType:
    """
    Classify an engine failure to determine recovery strategy.

    Known SDK exception types are classified directly; anything else is
    classified from its message.

    Args:
        error: Exception raised by the engine client
        message: Error text (used when error is absent or unrecognized)

    Returns:
        FailureType indicating recovery strategy

    Examples:
        >>> classify_failure(message="Connection timeout")
        FailureType.TRANSIENT

        >>> classify_failure(message="Invalid argument type")
        FailureType.STRUCTURAL

        >>> classify_failure(message="permission denied")
        FailureType.TERMINAL
    """
    if isinstance(error, _TRANSIENT_ERRORS):
        return FailureType.TRANSIENT

    if isinstance(error, _TERMINAL_ERRORS):
        return FailureType.TERMINAL

    text = message if message is not None else (str(error) if error else "")
    if not text:
        logger_classifier.warning("CLASSIFY_FAILURE | empty error, defaulting to STRUCTURAL")
        return FailureType.STRUCTURAL

    e = text.lower()

    transient_indicators = (
        "timeout", "timed out", "connection error", "network error",
        "rate limit", "temporarily unavailable", "service unavailable",
        "overloaded", "502", "503", "504", "connection reset", "connection refused"
    )

    if any(indicator in e for indicator in transient_indicators):
        logger_classifier.debug(f"CLASSIFY_FAILURE | TRANSIENT | error={text[:50]}")
        return FailureType.TRANSIENT

    terminal_indicators = (
        "not allowed", "permission denied", "access denied",
        "authentication failed", "unauthorized", "forbidden",
        "invalid api key", "missing required environment variable"
    )

    if any(indicator in e for indicator in terminal_indicators):
        logger_classifier.debug(f"CLASSIFY_FAILURE | TERMINAL | error={text[:50]}")
        return FailureType.TERMINAL

    logger_classifier.debug(f"CLASSIFY_FAILURE | STRUCTURAL | error={text[:50]}")
    return FailureType.STRUCTURAL
