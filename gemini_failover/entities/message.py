from typing import TypedDict


class ImageAttachment(TypedDict):
    """Inline image payload encoded as base64."""

    mime_type: str
    data: str


class TextPart(TypedDict):
    text: str


class HistoryTurn(TypedDict):
    """Prior conversation turn, in chronological order."""

    role: str
    parts: list[TextPart]
