from dataclasses import dataclass, field


@dataclass(frozen=True)
class DispatchConfig:
    """Per-call inputs that are not part of the conversation itself.

    credentials are tried left to right, exactly as given.
    """

    credentials: list[str] = field(default_factory=list)
    system_instruction: str = ""
