from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, ConfigDict

from akeneo_client.transport.errors import InvalidOptionsError


QueryParams = dict[str, list[str]]


@runtime_checkable
class Queryable(Protocol):
    def to_query_params(self) -> QueryParams:
        ...


class QueryOptions(BaseModel):
    """Named, typed query fields.

    ``None`` fields are left out. Booleans become ``true``/``false``, lists
    are comma-joined and mappings (the ``search`` filter) are sent as compact
    JSON.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_query_params(self) -> QueryParams:
        params: QueryParams = {}
        for name, value in self.model_dump(exclude_none=True, by_alias=True).items():
            params[name] = [_format_query_value(name, value)]
        return params


class ListOptions(QueryOptions):
    page: int | None = None
    limit: int | None = None
    with_count: bool | None = None
    pagination_type: str | None = None
    search_after: str | None = None
    search: dict[str, Any] | None = None


class ProductListOptions(ListOptions):
    scope: str | None = None
    locales: list[str] | None = None
    attributes: list[str] | None = None
    with_attribute_options: bool | None = None
    with_quality_scores: bool | None = None
    with_completenesses: bool | None = None


class CategoryListOptions(ListOptions):
    with_positions: bool | None = None


def _format_query_value(name: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float | str):
        return str(value)
    if isinstance(value, list | tuple):
        return ",".join(_format_query_value(name, item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    raise InvalidOptionsError(f"Query option '{name}' has an unsupported value type {type(value).__name__}.")


def normalize_query_options(options: object) -> QueryParams:
    if options is None:
        return {}
    if isinstance(options, Queryable):
        return options.to_query_params()
    if isinstance(options, httpx.QueryParams):
        return {key: options.get_list(key) for key in options.keys()}
    if isinstance(options, Mapping):
        params: QueryParams = {}
        for key, raw in options.items():
            if not isinstance(key, str):
                raise InvalidOptionsError("Query option keys must be strings.")
            if isinstance(raw, str):
                params[key] = [raw]
            elif isinstance(raw, list | tuple) and all(isinstance(item, str) for item in raw):
                params[key] = list(raw)
            else:
                raise InvalidOptionsError(f"Query option '{key}' must be a string or a sequence of strings.")
        return params
    raise InvalidOptionsError(
        f"Query options must be a mapping of strings or a queryable options object, got {type(options).__name__}."
    )


def merge_query(url: httpx.URL, options: object) -> httpx.URL:
    params = normalize_query_options(options)
    if not params:
        return url
    return url.copy_merge_params(params)
