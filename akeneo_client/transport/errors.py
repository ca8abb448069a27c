from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import requests  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from akeneo_client.schemas.common import Violation


class AkeneoClientError(Exception):
    def __init__(
        self,
        message: str,
        *,
        error_code: str,
        reason_code: str,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.reason_code = reason_code
        self.retryable = retryable


class ConfigurationError(AkeneoClientError):
    def __init__(self, message: str = "Akeneo client configuration is invalid.") -> None:
        super().__init__(message, error_code="client_configuration", reason_code="configuration_invalid")


class AuthError(AkeneoClientError):
    def __init__(self, message: str = "Akeneo authentication failed.", *, reason_code: str = "auth_failed") -> None:
        super().__init__(message, error_code="client_auth", reason_code=reason_code)


class TransportError(AkeneoClientError):
    def __init__(self, message: str = "Akeneo transport failed.", *, reason_code: str = "transport_error") -> None:
        super().__init__(message, error_code="client_transport", reason_code=reason_code)


class RequestError(AkeneoClientError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        code: int | None = None,
        violations: tuple["Violation", ...] = (),
        upstream_payload: dict[str, Any] | None = None,
        reason_code: str = "request_failed",
    ) -> None:
        super().__init__(
            message,
            error_code="client_request",
            reason_code=reason_code,
            retryable=status_code == 429,
        )
        self.status_code = status_code
        self.code = code if code is not None else status_code
        self.violations = violations
        self.upstream_payload = upstream_payload


class NotFoundError(RequestError):
    def __init__(self, message: str, *, upstream_payload: dict[str, Any] | None = None) -> None:
        super().__init__(
            message,
            status_code=404,
            upstream_payload=upstream_payload,
            reason_code="not_found",
        )


class InvalidOptionsError(AkeneoClientError):
    def __init__(self, message: str = "Query options have an unsupported shape.") -> None:
        super().__init__(message, error_code="client_options", reason_code="options_invalid")


class DecodeError(AkeneoClientError):
    def __init__(self, message: str, *, envelope: Any = None, payload: Any = None) -> None:
        super().__init__(message, error_code="client_decode", reason_code="decode_failed")
        self.envelope = envelope
        self.payload = payload


def classify_transport_error(exc: Exception, *, operation: str) -> TransportError:
    if isinstance(exc, TransportError):
        return exc
    if isinstance(exc, TimeoutError | httpx.TimeoutException | requests.Timeout):
        return TransportError(f"{operation} timed out.", reason_code="timeout")
    if isinstance(exc, ConnectionError | httpx.ConnectError | requests.ConnectionError):
        return TransportError(f"{operation} connection failed.", reason_code="connection_error")
    return TransportError(f"{operation} failed: {exc}", reason_code="transport_error")
