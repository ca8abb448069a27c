from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import httpx

from akeneo_client.core.config import ClientSettings, get_settings
from akeneo_client.schemas.common import MediaFile, Page
from akeneo_client.services.token_service import Credentials, TokenManager, TokenState
from akeneo_client.transport.errors import ConfigurationError, DecodeError
from akeneo_client.transport.executor import ExecutionResult, RequestExecutor
from akeneo_client.transport.rate_limit import RateLimiter
from akeneo_client.transport.retry import ThrottleRetryPolicy


MEDIA_FILES_PATH = "/api/rest/v1/media-files"


class Session:
    """Composition root for one authenticated connection to an Akeneo PIM.

    A session is safe to share between threads: the token manager serializes
    renewal and the rate limiter spaces every dispatch, retries included.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        http_client: httpx.Client | None = None,
        limiter: RateLimiter | None = None,
        retry_policy: ThrottleRetryPolicy | None = None,
        token_manager: TokenManager | None = None,
        **overrides: Any,
    ) -> None:
        unknown = sorted(set(overrides) - set(ClientSettings.model_fields))
        if unknown:
            raise ConfigurationError(f"Unknown Akeneo client settings: {', '.join(unknown)}.")
        try:
            base_settings = settings or get_settings()
            self.settings = ClientSettings.model_validate({**base_settings.model_dump(), **overrides})
        except ValueError as exc:
            raise ConfigurationError(f"Akeneo client configuration is invalid: {exc}") from exc
        problems = self.settings.connection_problems()
        if problems:
            raise ConfigurationError(f"Akeneo client configuration is invalid: {'; '.join(problems)}.")

        self.credentials = Credentials(
            client_id=self.settings.client_id,
            secret=self.settings.secret,
            username=self.settings.username,
            password=self.settings.password,
        )
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.Client(
            timeout=httpx.Timeout(self.settings.http_timeout_seconds),
            limits=httpx.Limits(max_keepalive_connections=10),
        )
        self.limiter = limiter or RateLimiter(self.settings.rate_limit, self.settings.rate_period_seconds)
        self.retry_policy = retry_policy or ThrottleRetryPolicy(
            max_retries=self.settings.retry_count,
            min_wait_seconds=self.settings.retry_wait_seconds,
            max_wait_seconds=self.settings.retry_max_wait_seconds,
        )
        self.auth = token_manager or TokenManager(
            base_url=self.settings.base_url,
            credentials=self.credentials,
            timeout_seconds=self.settings.http_timeout_seconds,
            user_agent=self.settings.user_agent,
        )
        self.executor = RequestExecutor(
            base_url=self.settings.base_url,
            http_client=self._http_client,
            token_provider=self.auth.ensure_valid,
            limiter=self.limiter,
            retry_policy=self.retry_policy,
            user_agent=self.settings.user_agent,
            timeout_seconds=self.settings.http_timeout_seconds,
        )

    @property
    def version(self) -> str:
        return self.settings.version_string

    def authenticate(self) -> TokenState:
        return self.auth.grant_by_password()

    def ensure_token(self) -> str:
        return self.auth.ensure_valid()

    def request(
        self,
        method: str,
        path: str,
        options: object = None,
        body: Any = None,
        *,
        decode: bool = True,
    ) -> ExecutionResult:
        return self.executor.execute(method, path, options, body, decode=decode)

    def get(self, path: str, options: object = None) -> Any:
        return self.request("GET", path, options).data

    def post(self, path: str, body: Any = None, options: object = None) -> Any:
        return self.request("POST", path, options, body).data

    def patch(self, path: str, body: Any = None, options: object = None) -> Any:
        return self.request("PATCH", path, options, body).data

    def delete(self, path: str, options: object = None) -> None:
        self.request("DELETE", path, options, decode=False)

    def list_page(self, path: str, options: object = None) -> Page:
        payload = self.get(path, options)
        if not isinstance(payload, dict):
            raise DecodeError("Akeneo list response must be a JSON object.", payload=payload)
        return Page.from_payload(payload)

    def iter_items(self, path: str, options: object = None) -> Iterator[dict[str, Any]]:
        page = self.list_page(path, options)
        while True:
            yield from page.items
            if not page.links.has_next():
                return
            page = self.list_page(path, page.links.next_options())

    def download(self, url: str, destination: str | os.PathLike[str]) -> Path:
        return self.executor.download(url, destination)

    def upload(self, path: str, files: Mapping[str, Any], data: Mapping[str, str] | None = None) -> str | None:
        return self.executor.upload(path, files, data)

    def get_media_file(self, code: str) -> MediaFile:
        return MediaFile.model_validate(self.get(f"{MEDIA_FILES_PATH}/{code}"))

    def download_media_file(self, code: str, destination: str | os.PathLike[str]) -> Path:
        return self.download(f"{MEDIA_FILES_PATH}/{code}/download", destination)

    def close(self) -> None:
        if self._owns_client:
            self._http_client.close()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()
