from akeneo_client.transport.errors import (
    AkeneoClientError,
    AuthError,
    ConfigurationError,
    DecodeError,
    InvalidOptionsError,
    NotFoundError,
    RequestError,
    TransportError,
)
from akeneo_client.transport.executor import ExecutionResult, RequestExecutor
from akeneo_client.transport.rate_limit import RateLimiter
from akeneo_client.transport.retry import ThrottleRetryPolicy

__all__ = [
    "AkeneoClientError",
    "AuthError",
    "ConfigurationError",
    "DecodeError",
    "ExecutionResult",
    "InvalidOptionsError",
    "NotFoundError",
    "RateLimiter",
    "RequestError",
    "RequestExecutor",
    "ThrottleRetryPolicy",
    "TransportError",
]
