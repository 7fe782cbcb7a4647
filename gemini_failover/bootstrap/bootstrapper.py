from gemini_failover.bootstrap.components import configure_tracing
from gemini_failover.dependencies.components import get_components
from gemini_failover.dependencies.services import (
    get_dispatch_config,
    get_dispatch_service,
)
from gemini_failover.entities.dispatch_config import DispatchConfig
from gemini_failover.services.DispatchService.dispatch_service_interface import (
    DispatchServiceInterface,
)


def bootstrap_dispatcher(
    env: str | None = None,
) -> tuple[DispatchServiceInterface, DispatchConfig]:
    components = get_components(env=env)
    configure_tracing()

    dispatcher: DispatchServiceInterface = get_dispatch_service(components)
    config: DispatchConfig = get_dispatch_config(components)
    return dispatcher, config
