from akeneo_client.services.token_service import Credentials, TokenManager, TokenState
from akeneo_client.services.value_decoder import decode_value, decode_values

__all__ = [
    "Credentials",
    "TokenManager",
    "TokenState",
    "decode_value",
    "decode_values",
]
