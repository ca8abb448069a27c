from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field

from akeneo_client.schemas.common import Links
from akeneo_client.transport.errors import DecodeError


class ValueEnvelope(BaseModel):
    """Wire shape shared by every attribute value, whatever the attribute type."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    locale: str | None = None
    scope: str | None = None
    data: Any = None
    links: Any = Field(default=None, alias="_links")
    linked_data: Any = None

    def is_localized(self) -> bool:
        return bool(self.locale)

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"locale": self.locale, "scope": self.scope, "data": self.data}
        if self.links is not None:
            wire["_links"] = self.links
        if self.linked_data is not None:
            wire["linked_data"] = self.linked_data
        return wire


@dataclass(frozen=True)
class Amount:
    """Either an exact integer or the decimal string the PIM sent.

    Attributes without decimals come back as JSON integers and decimal-enabled
    ones as formatted strings (``"12.50"``); the two are kept apart.
    """

    value: int | str

    @classmethod
    def from_wire(cls, raw: Any) -> "Amount":
        if isinstance(raw, bool) or not isinstance(raw, int | str):
            raise DecodeError(f"amount must be an integer or a decimal string, got {type(raw).__name__}", payload=raw)
        return cls(raw)

    @classmethod
    def from_wire_optional(cls, raw: Any) -> "Amount | None":
        return None if raw is None else cls.from_wire(raw)

    @property
    def is_decimal(self) -> bool:
        return isinstance(self.value, str)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, kw_only=True)
class ScopedValue:
    locale: str | None = None
    scope: str | None = None

    value_type: ClassVar[str] = ""

    def _envelope(self, data: Any, **extra: Any) -> ValueEnvelope:
        return ValueEnvelope(locale=self.locale, scope=self.scope, data=data, **extra)


@dataclass(frozen=True)
class TextValue(ScopedValue):
    """pim_catalog_text, textarea, date, file and image values, and decimal numbers."""

    data: str | None
    value_type: ClassVar[str] = "string"

    def to_envelope(self) -> ValueEnvelope:
        return self._envelope(self.data)


@dataclass(frozen=True)
class TextCollectionValue(ScopedValue):
    data: tuple[str, ...]
    value_type: ClassVar[str] = "string_collection"

    def to_envelope(self) -> ValueEnvelope:
        return self._envelope(list(self.data))


@dataclass(frozen=True)
class NumberValue(ScopedValue):
    data: int
    value_type: ClassVar[str] = "number"

    def to_envelope(self) -> ValueEnvelope:
        return self._envelope(self.data)


@dataclass(frozen=True)
class BooleanValue(ScopedValue):
    data: bool
    value_type: ClassVar[str] = "boolean"

    def to_envelope(self) -> ValueEnvelope:
        return self._envelope(self.data)


@dataclass(frozen=True)
class MetricValue(ScopedValue):
    amount: Amount | None
    unit: str
    value_type: ClassVar[str] = "metric"

    def amount_text(self) -> str:
        return "" if self.amount is None else str(self.amount)

    def to_envelope(self) -> ValueEnvelope:
        amount = None if self.amount is None else self.amount.value
        return self._envelope({"amount": amount, "unit": self.unit})


@dataclass(frozen=True)
class Price:
    amount: Amount | None
    currency: str


@dataclass(frozen=True)
class PriceValue(ScopedValue):
    data: tuple[Price, ...]
    value_type: ClassVar[str] = "price"

    def amount_for(self, currency: str) -> str | None:
        for price in self.data:
            if price.currency == currency:
                return None if price.amount is None else str(price.amount)
        return None

    def to_envelope(self) -> ValueEnvelope:
        return self._envelope(
            [{"amount": None if p.amount is None else p.amount.value, "currency": p.currency} for p in self.data]
        )


@dataclass(frozen=True)
class LinkedData:
    attribute: str = ""
    code: str = ""
    labels: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __hash__(self) -> int:
        return hash((self.attribute, self.code, _frozen(self.labels)))

    def label(self, locale: str) -> str | None:
        return self.labels.get(locale)

    def to_wire(self) -> dict[str, Any]:
        return {"attribute": self.attribute, "code": self.code, "labels": dict(self.labels)}


@dataclass(frozen=True)
class SimpleSelectValue(ScopedValue):
    data: str | None
    linked_data: LinkedData
    value_type: ClassVar[str] = "simple_select"

    def to_envelope(self) -> ValueEnvelope:
        return self._envelope(self.data, linked_data=self.linked_data.to_wire())


@dataclass(frozen=True)
class MultiSelectValue(ScopedValue):
    data: tuple[str, ...]
    linked_data: Mapping[str, LinkedData]
    value_type: ClassVar[str] = "multi_select"

    def __hash__(self) -> int:
        return hash((self.locale, self.scope, self.data, _frozen(self.linked_data)))

    def to_envelope(self) -> ValueEnvelope:
        return self._envelope(
            list(self.data),
            linked_data={code: bundle.to_wire() for code, bundle in self.linked_data.items()},
        )


@dataclass(frozen=True)
class TableValue(ScopedValue):
    data: tuple[Mapping[str, Any], ...]
    value_type: ClassVar[str] = "table"

    def __hash__(self) -> int:
        return hash((self.locale, self.scope, _frozen(self.data)))

    def to_envelope(self) -> ValueEnvelope:
        return self._envelope([dict(row) for row in self.data])


@dataclass(frozen=True)
class MediaValue(ScopedValue):
    data: str | None
    links: Links
    value_type: ClassVar[str] = "media_link"

    def download_url(self) -> str:
        return self.links.download_href()

    def to_envelope(self) -> ValueEnvelope:
        return self._envelope(self.data, links=self.links.model_dump(by_alias=True, exclude_none=True))


@dataclass(frozen=True)
class MediaSetValue(ScopedValue):
    data: tuple[str, ...]
    links: tuple[Links, ...]
    value_type: ClassVar[str] = "media_set"

    def download_urls(self) -> list[str]:
        return [link.download_href() for link in self.links]

    def hrefs(self) -> list[str]:
        return [link.self_href() for link in self.links]

    def to_envelope(self) -> ValueEnvelope:
        return self._envelope(
            list(self.data),
            links=[link.model_dump(by_alias=True, exclude_none=True) for link in self.links],
        )


def _frozen(value: Any) -> Any:
    if isinstance(value, Mapping):
        return tuple(sorted((str(key), _frozen(item)) for key, item in value.items()))
    if isinstance(value, list | tuple):
        return tuple(_frozen(item) for item in value)
    return value


AttributeValue = Union[
    TextValue,
    TextCollectionValue,
    NumberValue,
    BooleanValue,
    MetricValue,
    PriceValue,
    SimpleSelectValue,
    MultiSelectValue,
    TableValue,
    MediaValue,
    MediaSetValue,
]
