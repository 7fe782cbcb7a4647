"""
Decide whether a Gemini failure is worth retrying with the next API key.

Gemini surfaces status codes and error reasons inside the exception text
rather than as typed errors, so the check is a plain substring allow-list.
Matching is case-sensitive.
"""

RETRYABLE_ERROR_MARKERS: tuple[str, ...] = (
    "429",
    "403",
    "RESOURCE_EXHAUSTED",
    "quota",
    "API_KEY_INVALID",
    "PERMISSION_DENIED",
)


def is_retryable(message: str) -> bool:
    """Return True when the message names a rate-limit, quota or key problem."""
    return any(marker in message for marker in RETRYABLE_ERROR_MARKERS)
