from __future__ import annotations

import base64
import logging
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable

import httpx
import requests  # type: ignore[import-untyped]

from akeneo_client.core.config import SAFETY_MARGIN_SECONDS
from akeneo_client.transport.errors import AuthError, classify_transport_error


logger = logging.getLogger("akeneo_client.auth")

TOKEN_PATH = "api/oauth/v1/token"


@dataclass(frozen=True)
class Credentials:
    client_id: str
    secret: str = field(repr=False)
    username: str
    password: str = field(repr=False)

    def basic_auth_header(self) -> str:
        raw = f"{self.client_id}:{self.secret}".encode("utf-8")
        return "Basic " + base64.b64encode(raw).decode("ascii")


@dataclass(frozen=True)
class TokenState:
    access_token: str = field(repr=False)
    refresh_token: str = field(repr=False)
    expires_at: float


class TokenManager:
    """Owns the access/refresh token pair of one session.

    ``ensure_valid`` is the entry point for request code. The whole
    check-expiry, exchange, store sequence runs under one lock so that racing
    callers trigger a single upstream exchange and share its outcome.
    """

    def __init__(
        self,
        *,
        base_url: str,
        credentials: Credentials,
        timeout_seconds: float = 10.0,
        user_agent: str = "",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._token_url = str(httpx.URL(base_url).join(TOKEN_PATH))
        self._credentials = credentials
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent
        self._clock = clock
        self._lock = Lock()
        self._state: TokenState | None = None
        self._generation = 0
        self._last_error: AuthError | None = None

    @property
    def state(self) -> TokenState | None:
        return self._state

    def needs_refresh(self) -> bool:
        state = self._state
        if state is None:
            return True
        return self._clock() + SAFETY_MARGIN_SECONDS >= state.expires_at

    def grant_by_password(self) -> TokenState:
        with self._lock:
            return self._grant_by_password()

    def grant_by_refresh_token(self) -> TokenState:
        with self._lock:
            return self._grant_by_refresh_token()

    def ensure_valid(self) -> str:
        observed_generation = self._generation
        with self._lock:
            if self._generation != observed_generation and self._last_error is not None:
                raise self._last_error
            if not self.needs_refresh():
                return self._state.access_token
            try:
                state = self._refresh_with_fallback()
            except AuthError as exc:
                self._last_error = exc
                raise
            else:
                self._last_error = None
            finally:
                self._generation += 1
            return state.access_token

    def _refresh_with_fallback(self) -> TokenState:
        if self._state is None:
            return self._grant_by_password()
        try:
            return self._grant_by_refresh_token()
        except AuthError as exc:
            logger.info(
                "Akeneo refresh grant failed, falling back to password grant.",
                extra={"event": "auth.refresh.fallback", "reason_code": exc.reason_code},
            )
            return self._grant_by_password()

    def _grant_by_password(self) -> TokenState:
        payload = {
            "grant_type": "password",
            "username": self._credentials.username,
            "password": self._credentials.password,
        }
        return self._exchange(payload, grant_type="password")

    def _grant_by_refresh_token(self) -> TokenState:
        if self._state is None or not self._state.refresh_token:
            raise AuthError("No refresh token is held.", reason_code="refresh_token_missing")
        payload = {"grant_type": "refresh_token", "refresh_token": self._state.refresh_token}
        return self._exchange(payload, grant_type="refresh_token")

    def _exchange(self, payload: dict[str, str], *, grant_type: str) -> TokenState:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": self._credentials.basic_auth_header(),
        }
        if self._user_agent:
            headers["User-Agent"] = self._user_agent
        try:
            response = requests.post(
                self._token_url,
                json=payload,
                headers=headers,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            transport_error = classify_transport_error(exc, operation="Akeneo token request")
            raise AuthError(
                f"Akeneo {grant_type} grant failed: {transport_error.message}",
                reason_code=transport_error.reason_code,
            ) from exc

        if response.status_code >= 400:
            raise AuthError(
                f"Akeneo {grant_type} grant rejected with status {response.status_code}: {_upstream_message(response)}",
                reason_code="grant_rejected",
            )

        state = self._normalize_token_payload(response, grant_type=grant_type)
        self._state = state
        logger.info(
            "Akeneo %s grant succeeded.",
            grant_type,
            extra={"event": f"auth.grant.{grant_type}"},
        )
        return state

    def _normalize_token_payload(self, response: requests.Response, *, grant_type: str) -> TokenState:
        try:
            body = response.json()
        except ValueError as exc:
            raise AuthError(
                f"Akeneo {grant_type} grant returned a non-JSON body.",
                reason_code="token_response_invalid",
            ) from exc
        if not isinstance(body, dict):
            raise AuthError(
                f"Akeneo {grant_type} grant returned an invalid body.",
                reason_code="token_response_invalid",
            )

        access_token = str(body.get("access_token") or "").strip()
        refresh_token = str(body.get("refresh_token") or "").strip()
        expires_in = _positive_int(body.get("expires_in"))
        missing = [
            name
            for name, ok in (
                ("access_token", bool(access_token)),
                ("refresh_token", bool(refresh_token)),
                ("expires_in", expires_in is not None),
            )
            if not ok
        ]
        if missing:
            raise AuthError(
                f"Akeneo {grant_type} grant response is missing {', '.join(missing)}.",
                reason_code="token_response_invalid",
            )
        return TokenState(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=self._clock() + expires_in,
        )


def _positive_int(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _upstream_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason or ""
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error_description") or body.get("error") or "")
    return ""
