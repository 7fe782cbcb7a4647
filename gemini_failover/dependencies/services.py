from gemini_failover.bootstrap.components import Components
from gemini_failover.bootstrap.settings import Settings
from gemini_failover.entities.dispatch_config import DispatchConfig
from gemini_failover.services.DispatchService.dispatch_service import DispatchService
from gemini_failover.services.DispatchService.dispatch_service_interface import (
    DispatchServiceInterface,
)


def get_dispatch_service(components: Components) -> DispatchServiceInterface:
    settings = components.get_component(Settings)
    return DispatchService(
        logger=components.get_logger("DispatchService"),
        model_name=settings.model_name,
    )


def get_system_instruction(components: Components) -> str:
    """
    Read the system instruction from the prompt file, falling back to SYSTEM_PROMPT.
    """
    settings = components.get_component(Settings)
    try:
        return settings.system_prompt_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        components.get_logger("Dependencies").warning(
            "System prompt file not found at %s, using SYSTEM_PROMPT",
            settings.system_prompt_path,
        )
        return settings.system_prompt


def get_dispatch_config(components: Components) -> DispatchConfig:
    settings = components.get_component(Settings)
    return DispatchConfig(
        credentials=list(settings.api_keys),
        system_instruction=get_system_instruction(components),
    )
