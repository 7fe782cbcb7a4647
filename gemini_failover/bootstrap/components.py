import logging
import os
import sys
from threading import Lock
from typing import Any, TypeVar, cast

from openinference.instrumentation.google_genai import GoogleGenAIInstrumentor

from gemini_failover.bootstrap.settings import Settings, load_settings


def _is_test_environment() -> bool:
    """
    Check if we are running in a test environment.

    Returns:
        True if running under pytest or if TESTING env var is set, False otherwise.
    """
    if any("pytest" in arg for arg in sys.argv):
        return True

    if os.getenv("TESTING", "").lower() in ("true", "1", "yes"):
        return True

    return False


def _validate_otel_env_vars() -> None:
    """
    Validate OpenTelemetry/Langfuse environment variables for instrumentation.

    Two configurations are accepted:

    1.  **Langfuse Native Integration:** `LANGFUSE_PUBLIC_KEY`, `LANGFUSE_SECRET_KEY`
        and `LANGFUSE_BASE_URL` are all set.

    2.  **Manual OpenTelemetry Configuration:** `OTEL_EXPORTER_OTLP_ENDPOINT` and
        `OTEL_EXPORTER_OTLP_HEADERS` are both set.

    Raises:
        RuntimeError: If neither configuration is complete.
    """
    otel_endpoint: str = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "").strip()
    otel_headers: str = os.getenv("OTEL_EXPORTER_OTLP_HEADERS", "").strip()

    langfuse_public_key: str = os.getenv("LANGFUSE_PUBLIC_KEY", "").strip()
    langfuse_secret_key: str = os.getenv("LANGFUSE_SECRET_KEY", "").strip()
    langfuse_base_url: str = os.getenv("LANGFUSE_BASE_URL", "").strip()

    if langfuse_public_key and langfuse_secret_key and langfuse_base_url:
        return

    if not otel_endpoint:
        raise RuntimeError(
            "OTEL_EXPORTER_OTLP_ENDPOINT environment variable is not set or is empty. "
            "Please set it with a valid OTLP endpoint URL, or provide "
            "LANGFUSE_PUBLIC_KEY, LANGFUSE_SECRET_KEY and LANGFUSE_BASE_URL."
        )

    if not otel_headers:
        raise RuntimeError(
            "OTEL_EXPORTER_OTLP_HEADERS environment variable is not set or is empty. "
            "Please set it directly (e.g., 'Authorization=Basic <base64_credentials>') "
            "or provide LANGFUSE_PUBLIC_KEY, LANGFUSE_SECRET_KEY and LANGFUSE_BASE_URL."
        )


def configure_tracing() -> bool:
    """
    Instrument the Gemini SDK for tracing, outside of tests.

    Returns:
        True if instrumentation was installed, False if skipped.
    """
    if _is_test_environment():
        return False

    _validate_otel_env_vars()
    GoogleGenAIInstrumentor().instrument()
    return True


T = TypeVar("T")


class ComponentsMeta(type):
    _instances: dict[tuple[type, str], "Components"] = {}
    _lock: Lock = Lock()

    def __call__(cls, *args, **kwargs):
        env = args[0] if args else kwargs.get("env")
        if env is None:
            raise ValueError("Environment must be provided")

        key = (cls, str(env))
        with cls._lock:
            if key not in cls._instances:
                instance = super().__call__(*args, **kwargs)
                cls._instances[key] = instance
        return cls._instances[key]


class Components(metaclass=ComponentsMeta):
    def __init__(self, env: str) -> None:
        self.__env: str = env
        self.__components: dict[type[Any], Any] = self.__bootstrap_components()

    def __bootstrap_components(self) -> dict[type[Any], Any]:
        settings: Settings = load_settings(self.__env)

        logging.basicConfig(
            level=getattr(logging, settings.log_level, logging.INFO),
            format=settings.log_format,
        )
        logger = logging.getLogger("Components")
        logger.info(
            "Components ready for %s: %d API key(s), model %s",
            settings.environment,
            len(settings.api_keys),
            settings.model_name,
        )

        return {Settings: settings}

    def get_component(self, component_name: type[T]) -> T:
        if component_name not in self.__components:
            raise ValueError(f"Component {component_name} not found")

        return cast(T, self.__components[component_name])

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)
