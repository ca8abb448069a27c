from akeneo_client.core.config import PIM_VERSIONS, ClientSettings, get_settings
from akeneo_client.core.logging_config import configure_logging

__all__ = [
    "PIM_VERSIONS",
    "ClientSettings",
    "configure_logging",
    "get_settings",
]
