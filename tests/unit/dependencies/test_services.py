import logging
from pathlib import Path
from unittest.mock import MagicMock

from gemini_failover.bootstrap.settings import Settings
from gemini_failover.dependencies.services import (
    get_dispatch_config,
    get_dispatch_service,
)
from gemini_failover.services.DispatchService.dispatch_service import DispatchService


def make_components(settings: Settings) -> MagicMock:
    components = MagicMock()
    components.get_component.return_value = settings
    components.get_logger.side_effect = logging.getLogger
    return components


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = {
        "environment": "development",
        "api_keys": ["K1", "K2"],
        "model_name": "gemini-2.5-flash",
        "system_prompt_path": tmp_path / "system.prompt",
        "system_prompt": "Fallback prompt",
        "log_level": "INFO",
        "log_format": "%(message)s",
    }
    values.update(overrides)
    return Settings(**values)


def test_dispatch_service_uses_configured_model(tmp_path):
    service = get_dispatch_service(make_components(make_settings(tmp_path)))

    assert isinstance(service, DispatchService)
    assert service.model_name == "gemini-2.5-flash"
    assert service.logger.name == "DispatchService"


def test_dispatch_config_reads_prompt_file(tmp_path):
    prompt_path = tmp_path / "system.prompt"
    prompt_path.write_text("You are Yuno.", encoding="utf-8")

    config = get_dispatch_config(make_components(make_settings(tmp_path)))

    assert config.credentials == ["K1", "K2"]
    assert config.system_instruction == "You are Yuno."


def test_dispatch_config_falls_back_to_system_prompt(tmp_path):
    config = get_dispatch_config(make_components(make_settings(tmp_path)))

    assert config.system_instruction == "Fallback prompt"


def test_dispatch_config_copies_key_list(tmp_path):
    settings = make_settings(tmp_path)

    config = get_dispatch_config(make_components(settings))

    assert config.credentials == settings.api_keys
    assert config.credentials is not settings.api_keys
