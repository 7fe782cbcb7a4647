from dotenv import load_dotenv

from gemini_failover.bootstrap.components import Components
from gemini_failover.bootstrap.settings import resolve_environment


def get_components(env: str | None = None) -> Components:
    # APP_ENV may come from `.env`, so load it before resolving.
    load_dotenv(override=False)
    return Components(resolve_environment(env))
