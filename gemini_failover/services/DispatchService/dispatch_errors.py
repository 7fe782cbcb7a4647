"""
Errors raised by the DispatchService.

Every failure surfaced to callers derives from DispatchError, so callers can
catch one type and still branch on the concrete class for alerting.
"""


class DispatchError(Exception):
    """Base class for every dispatch failure."""


class MessageValidationError(DispatchError):
    """The outbound turn has no usable content. No request was made."""


class EmptyResponseError(DispatchError):
    """Gemini answered, but the reply text was blank."""


class RetryableTransportError(DispatchError):
    """A key-specific or quota failure on one attempt.

    Recorded per attempt and never raised to the caller on its own.
    """

    def __init__(self, credential_index: int, message: str) -> None:
        super().__init__(message)
        self.credential_index = credential_index
        self.message = message


class FatalTransportError(DispatchError):
    """A non-retryable transport failure that aborts the call."""

    def __init__(self, message: str, stage: str, credential_index: int) -> None:
        super().__init__(f"AI Connection Error: {message}")
        self.stage = stage
        self.credential_index = credential_index


class CredentialsExhaustedError(DispatchError):
    """Every key was tried and each one failed with a retryable error."""

    def __init__(self, failures: list[RetryableTransportError] | None = None) -> None:
        self.failures = failures or []
        message = "All API keys exhausted. Please update keys in Admin Dashboard."
        if self.failures:
            message = f"{message} Last error: {self.failures[-1].message}"
        super().__init__(message)
