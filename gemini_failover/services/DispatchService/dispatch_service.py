"""
DispatchService sends one conversation turn to Gemini with API-key failover.

Keys are tried strictly in order, one request at a time. A key is abandoned for
the next one only when its failure looks like a rate-limit, quota or key
problem; any other failure ends the call.
"""

from __future__ import annotations

import base64
import binascii
import logging

from google import genai
from google.genai import types
from langfuse import observe

from gemini_failover.entities.dispatch_config import DispatchConfig
from gemini_failover.entities.message import HistoryTurn, ImageAttachment
from gemini_failover.services.DispatchService.dispatch_errors import (
    CredentialsExhaustedError,
    EmptyResponseError,
    FatalTransportError,
    MessageValidationError,
    RetryableTransportError,
)
from gemini_failover.services.DispatchService.dispatch_service_interface import (
    DispatchServiceInterface,
)
from gemini_failover.services.DispatchService.retry_classifier import is_retryable


DEFAULT_MODEL_NAME = "gemini-2.0-flash-exp"

# Generation policy, identical for every attempt and every call
TEMPERATURE = 1.3
TOP_K = 40
TOP_P = 0.95
MAX_OUTPUT_TOKENS = 8192

MODEL_ROLE = "model"
USER_ROLE = "user"
MODEL_ROLE_ALIASES = frozenset({"model", "assistant"})


def normalize_role(role: str | None) -> str:
    """Map any incoming role onto the two roles Gemini accepts."""
    return MODEL_ROLE if role in MODEL_ROLE_ALIASES else USER_ROLE


def format_history(history: list[HistoryTurn]) -> list[types.Content]:
    """Convert prior turns into Gemini chat history, keeping their order."""
    return [
        types.Content(
            role=normalize_role(turn.get("role")),
            parts=[
                types.Part.from_text(text=part.get("text", ""))
                for part in turn.get("parts", [])
            ],
        )
        for turn in history
    ]


def decode_attachment_data(data: str | None) -> bytes:
    """
    Decode standard or URL-safe base64, ignoring line breaks and missing padding.

    Raises:
        binascii.Error: if the payload is empty or not base64
    """
    compact = "".join((data or "").split())
    if not compact:
        raise binascii.Error("no data")
    compact += "=" * (-len(compact) % 4)
    try:
        return base64.b64decode(compact, validate=True)
    except binascii.Error:
        return base64.b64decode(
            compact.replace("-", "+").replace("_", "/"), validate=True
        )


def build_message_parts(
    message: str | None,
    images: list[ImageAttachment],
) -> list[types.Part]:
    """
    Build the parts of the outbound turn: text first, then images in order.

    Raises:
        MessageValidationError: if nothing usable is left, or an attachment
            cannot be decoded
    """
    parts: list[types.Part] = []

    if message and message.strip():
        parts.append(types.Part.from_text(text=message))

    for position, image in enumerate(images or []):
        mime_type = (image.get("mime_type") or "").strip()
        if not mime_type:
            raise MessageValidationError(f"Attachment {position} has no MIME type")
        try:
            image_bytes = decode_attachment_data(image.get("data"))
        except binascii.Error as e:
            raise MessageValidationError(
                f"Attachment {position} is not valid base64: {e}"
            ) from e
        parts.append(types.Part.from_bytes(data=image_bytes, mime_type=mime_type))

    if not parts:
        raise MessageValidationError("Message cannot be empty")

    return parts


class DispatchService(DispatchServiceInterface):
    """
    Gemini chat dispatcher with sequential API-key failover.

    The service holds no per-call state; concurrent dispatches on the same
    instance are independent.
    """

    def __init__(
        self,
        logger: logging.Logger,
        model_name: str = DEFAULT_MODEL_NAME,
    ) -> None:
        """
        Args:
            logger: Logger instance
            model_name: Gemini model used for every call
        """
        self.logger = logger
        self.model_name = model_name

    def _build_generation_config(
        self, system_instruction: str
    ) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=system_instruction or None,
            temperature=TEMPERATURE,
            top_k=TOP_K,
            top_p=TOP_P,
            max_output_tokens=MAX_OUTPUT_TOKENS,
        )

    @observe(capture_input=False)
    async def dispatch(
        self,
        message: str | None,
        images: list[ImageAttachment],
        history: list[HistoryTurn],
        config: DispatchConfig,
    ) -> str:
        credentials = config.credentials
        if not credentials:
            self.logger.error("No API keys available for dispatch")
            raise CredentialsExhaustedError()

        parts = build_message_parts(message, images)
        generation_config = self._build_generation_config(config.system_instruction)

        self.logger.info(
            "Dispatching %d part(s) with %d history turn(s) using model %s",
            len(parts),
            len(history),
            self.model_name,
        )

        failures: list[RetryableTransportError] = []
        last_error: Exception | None = None

        for index, credential in enumerate(credentials):
            stage = "connect"
            client: genai.Client | None = None
            try:
                client = genai.Client(api_key=credential)
                chat = client.aio.chats.create(
                    model=self.model_name,
                    config=generation_config,
                    history=format_history(history),
                )
                stage = "send"
                response = await chat.send_message(parts)
                stage = "read"
                text = response.text
            except Exception as e:
                error_message = str(e) or type(e).__name__
                retryable = is_retryable(error_message)
                self.logger.warning(
                    "API key index %d failed at %s (retryable=%s): %s",
                    index,
                    stage,
                    retryable,
                    error_message,
                )
                if not retryable:
                    raise FatalTransportError(error_message, stage, index) from e

                failures.append(RetryableTransportError(index, error_message))
                last_error = e
                if index + 1 < len(credentials):
                    self.logger.info("Switching to next API key (%d)...", index + 1)
                continue
            finally:
                if client is not None:
                    await client.aio.aclose()

            if not text or not text.strip():
                self.logger.error("API key index %d returned an empty response", index)
                raise EmptyResponseError("Empty response from AI")

            self.logger.info(
                "Received %d characters using API key index %d", len(text), index
            )
            return text

        self.logger.error("All %d API keys exhausted", len(credentials))
        raise CredentialsExhaustedError(failures) from last_error
