from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from gemini_failover.services.DispatchService.dispatch_service import (
    DEFAULT_MODEL_NAME,
)


DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
VALID_ENVIRONMENTS = frozenset({"development", "staging", "production"})


@dataclass(frozen=True)
class Settings:
    environment: str
    api_keys: list[str]
    model_name: str
    system_prompt_path: Path
    system_prompt: str
    log_level: str
    log_format: str


def _getenv(key: str, default: str = "") -> str:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    return value


def parse_api_keys() -> list[str]:
    """
    Collect the API key pool from the environment.

    GEMINI_API_KEYS (comma-separated) comes first, then GEMINI_API_KEY_1,
    GEMINI_API_KEY_2, ... until the first missing number. Order and duplicates
    are kept as configured.
    """
    keys = [
        key.strip() for key in _getenv("GEMINI_API_KEYS").split(",") if key.strip()
    ]

    number = 1
    while True:
        numbered = _getenv(f"GEMINI_API_KEY_{number}").strip()
        if not numbered:
            break
        keys.append(numbered)
        number += 1

    return keys


def resolve_environment(environment: str | None = None) -> str:
    """Use the explicit environment if given, else APP_ENV, else development."""
    resolved = (environment or _getenv("APP_ENV", "development")).strip().lower()
    if resolved not in VALID_ENVIRONMENTS:
        raise ValueError(f"Invalid environment: {resolved}")
    return resolved


def load_settings(environment: str | None = None) -> Settings:
    # Secrets may live in a local `.env`; real environment variables win.
    load_dotenv(override=False)

    environment = resolve_environment(environment)

    return Settings(
        environment=environment,
        api_keys=parse_api_keys(),
        model_name=_getenv("GEMINI_MODEL_NAME", DEFAULT_MODEL_NAME).strip(),
        system_prompt_path=Path(_getenv("SYSTEM_PROMPT_PATH", "system.prompt")),
        system_prompt=_getenv("SYSTEM_PROMPT"),
        log_level=_getenv("LOG_LEVEL", "INFO").strip().upper(),
        log_format=_getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT),
    )
