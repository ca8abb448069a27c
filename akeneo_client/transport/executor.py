from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import httpx
from pydantic import BaseModel, ValidationError

from akeneo_client.schemas.common import ErrorEnvelope
from akeneo_client.transport.errors import (
    DecodeError,
    NotFoundError,
    RequestError,
    classify_transport_error,
)
from akeneo_client.transport.query import merge_query
from akeneo_client.transport.rate_limit import RateLimiter
from akeneo_client.transport.retry import ThrottleRetryPolicy


logger = logging.getLogger("akeneo_client.transport")

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class ExecutionResult:
    data: Any
    headers: httpx.Headers
    status_code: int


class RequestExecutor:
    def __init__(
        self,
        *,
        base_url: str,
        http_client: httpx.Client,
        token_provider: Callable[[], str],
        limiter: RateLimiter,
        retry_policy: ThrottleRetryPolicy,
        user_agent: str,
        timeout_seconds: float,
    ) -> None:
        self._base_url = httpx.URL(base_url)
        self._client = http_client
        self._token_provider = token_provider
        self._limiter = limiter
        self._retry_policy = retry_policy
        self._user_agent = user_agent
        self._timeout_seconds = timeout_seconds

    def resolve(self, path: str) -> httpx.URL:
        return self._base_url.join(path)

    def execute(
        self,
        method: str,
        path: str,
        options: object = None,
        body: Any = None,
        *,
        decode: bool = True,
    ) -> ExecutionResult:
        token = self._token_provider()
        url = merge_query(self.resolve(path), options)
        headers = self._headers(token, content_type=JSON_CONTENT_TYPE, accept=JSON_CONTENT_TYPE)
        json_body = _serialize_body(body)
        response = self._dispatch(method, url, headers=headers, json=json_body)
        self._raise_for_error(response, method=method, url=url)
        data = _decode_json(response) if decode else None
        return ExecutionResult(data=data, headers=response.headers, status_code=response.status_code)

    def download(self, url: str, destination: str | os.PathLike[str]) -> Path:
        """Fetch a binary resource into ``destination``.

        The body is streamed into a temporary sibling file which replaces the
        destination only once fully written, so a failed transfer leaves any
        existing file untouched and never creates a partial one.
        """

        token = self._token_provider()
        target = self.resolve(url)
        headers = self._headers(token)
        response = self._dispatch("GET", target, headers=headers, stream=True)
        path = Path(destination)
        try:
            if response.status_code == 404:
                raise NotFoundError(f"file not found : {target}")
            try:
                if response.status_code >= 400:
                    response.read()
                else:
                    _write_atomically(path, response.iter_bytes())
            except httpx.HTTPError as exc:
                raise classify_transport_error(exc, operation=f"GET {target.path}") from exc
            self._raise_for_error(response, method="GET", url=target)
        finally:
            response.close()
        logger.info("Akeneo download completed.", extra={"event": "download.completed", "url": target.path})
        return path

    def upload(
        self,
        path: str,
        files: Mapping[str, Any],
        data: Mapping[str, str] | None = None,
    ) -> str | None:
        """POST a multipart body and return the ``Location`` of the created resource."""

        token = self._token_provider()
        url = self.resolve(path)
        headers = self._headers(token)
        buffered = {name: _buffer_file(part) for name, part in files.items()}
        response = self._dispatch("POST", url, headers=headers, files=buffered, data=dict(data or {}))
        self._raise_for_error(response, method="POST", url=url)
        location = response.headers.get("Location")
        logger.info("Akeneo upload completed.", extra={"event": "upload.completed", "url": url.path})
        return location

    def _headers(self, token: str, *, content_type: str | None = None, accept: str | None = None) -> dict[str, str]:
        headers = {
            "User-Agent": self._user_agent,
            "Authorization": f"Bearer {token}",
        }
        if content_type:
            headers["Content-Type"] = content_type
        if accept:
            headers["Accept"] = accept
        return headers

    def _dispatch(
        self,
        method: str,
        url: httpx.URL,
        *,
        headers: dict[str, str],
        stream: bool = False,
        **request_kwargs: Any,
    ) -> httpx.Response:
        retries = 0
        while True:
            self._limiter.acquire()
            request = self._client.build_request(
                method,
                url,
                headers=headers,
                timeout=self._timeout_seconds,
                **request_kwargs,
            )
            try:
                response = self._client.send(request, stream=stream)
            except httpx.HTTPError as exc:
                raise classify_transport_error(exc, operation=f"{method} {url.path}") from exc
            if not self._retry_policy.should_retry(response.status_code, retries):
                return response
            response.close()
            retries += 1
            delay = self._retry_policy.delay_for_retry(retries)
            logger.warning(
                "Akeneo request throttled, retrying.",
                extra={
                    "event": "request.throttled",
                    "method": method,
                    "url": url.path,
                    "attempt": retries,
                    "delay_seconds": delay,
                },
            )
            self._retry_policy.sleep_fn(delay)

    def _raise_for_error(self, response: httpx.Response, *, method: str, url: httpx.URL) -> None:
        if response.status_code < 400:
            return
        envelope, payload = _parse_error_envelope(response)
        code = envelope.code or response.status_code
        message = envelope.message or f"HTTP {response.status_code}"
        if code == 422 and envelope.errors:
            details = "; ".join(violation.describe() for violation in envelope.errors)
            message = f"{message} [{details}]"
        logger.warning(
            "Akeneo request failed.",
            extra={"event": "request.failed", "method": method, "url": url.path, "status_code": response.status_code},
        )
        raise RequestError(
            f"request error : {message}",
            status_code=response.status_code,
            code=code,
            violations=tuple(envelope.errors),
            upstream_payload=payload,
        )


def _serialize_body(body: Any) -> Any:
    if body is None:
        return None
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    return body


def _decode_json(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError("Akeneo response is not valid JSON.", payload=response.text) from exc


def _parse_error_envelope(response: httpx.Response) -> tuple[ErrorEnvelope, dict[str, Any] | None]:
    if not response.content:
        return ErrorEnvelope(code=response.status_code, message=response.reason_phrase), None
    try:
        payload = response.json()
    except ValueError as exc:
        raise DecodeError(
            f"Akeneo error response (status {response.status_code}) is not valid JSON.",
            payload=response.text,
        ) from exc
    if not isinstance(payload, dict):
        raise DecodeError(
            f"Akeneo error response (status {response.status_code}) must be a JSON object.",
            payload=payload,
        )
    try:
        return ErrorEnvelope.model_validate(payload), payload
    except ValidationError as exc:
        raise DecodeError(f"Akeneo error response is malformed: {exc}", payload=payload) from exc


def _buffer_file(part: Any) -> Any:
    # multipart parts are re-sent on retry, so file objects are read up front
    if isinstance(part, tuple):
        filename, content, *rest = part
        if hasattr(content, "read"):
            content = content.read()
        return (filename, content, *rest)
    if hasattr(part, "read"):
        name = os.path.basename(str(getattr(part, "name", "upload")))
        return (name, part.read())
    return part


def _write_atomically(path: Path, chunks: Iterator[bytes]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".part")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            for chunk in chunks:
                handle.write(chunk)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
