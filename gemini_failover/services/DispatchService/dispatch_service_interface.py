from abc import ABC, abstractmethod

from gemini_failover.entities.dispatch_config import DispatchConfig
from gemini_failover.entities.message import HistoryTurn, ImageAttachment


class DispatchServiceInterface(ABC):
    @abstractmethod
    async def dispatch(
        self,
        message: str | None,
        images: list[ImageAttachment],
        history: list[HistoryTurn],
        config: DispatchConfig,
    ) -> str:
        """
        Send one turn to Gemini and return the reply text.

        Keys in config.credentials are tried in order. A key is abandoned for
        the next one only when its failure is a rate-limit, quota or key error.

        Raises:
            MessageValidationError: message and images carry no content
            EmptyResponseError: the reply text was blank
            FatalTransportError: a non-retryable failure on any key
            CredentialsExhaustedError: every key failed with a retryable error
        """
