from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from akeneo_client.schemas.common import Links
from akeneo_client.schemas.values import (
    Amount,
    AttributeValue,
    BooleanValue,
    LinkedData,
    MediaSetValue,
    MediaValue,
    MetricValue,
    MultiSelectValue,
    NumberValue,
    Price,
    PriceValue,
    SimpleSelectValue,
    TableValue,
    TextCollectionValue,
    TextValue,
    ValueEnvelope,
)
from akeneo_client.transport.errors import DecodeError


def decode_value(envelope: ValueEnvelope | Mapping[str, Any]) -> AttributeValue:
    """Classify an attribute value by its shape and build the matching variant.

    Values carry no type tag. ``_links`` marks a media value and
    ``linked_data`` a select value; both are checked before ``data`` because
    their ``data`` would otherwise read as plain text or a text collection.
    """

    if not isinstance(envelope, ValueEnvelope):
        envelope = _coerce_envelope(envelope)
    if envelope.links is not None:
        return _decode_media(envelope)
    if envelope.linked_data is not None:
        return _decode_select(envelope)
    return _decode_plain(envelope)


def decode_values(values: Mapping[str, list[Any]]) -> dict[str, list[AttributeValue]]:
    return {attribute: [decode_value(item) for item in items] for attribute, items in values.items()}


def _coerce_envelope(raw: Any) -> ValueEnvelope:
    if not isinstance(raw, Mapping):
        raise DecodeError("value envelope must be an object", envelope=raw)
    try:
        return ValueEnvelope.model_validate(dict(raw))
    except ValidationError as exc:
        raise DecodeError(f"value envelope is invalid: {exc}", envelope=raw) from exc


def _is_optional_str(data: Any) -> bool:
    return data is None or isinstance(data, str)


def _is_str_sequence(data: Any) -> bool:
    return isinstance(data, list | tuple) and all(isinstance(item, str) for item in data)


def _is_mapping_sequence(data: Any) -> bool:
    return isinstance(data, list | tuple) and len(data) > 0 and all(isinstance(item, Mapping) for item in data)


def _scoped(envelope: ValueEnvelope) -> dict[str, str | None]:
    return {"locale": envelope.locale, "scope": envelope.scope}


def _decode_media(envelope: ValueEnvelope) -> MediaValue | MediaSetValue:
    if _is_optional_str(envelope.data):
        return MediaValue(envelope.data, _decode_links(envelope.links, envelope), **_scoped(envelope))
    if not _is_str_sequence(envelope.data):
        raise DecodeError("media data must be a file path or a list of file paths", envelope=envelope)
    if not isinstance(envelope.links, list | tuple):
        raise DecodeError("media set links must be a list", envelope=envelope)
    if len(envelope.links) != len(envelope.data):
        raise DecodeError(
            f"media set has {len(envelope.data)} paths but {len(envelope.links)} link bundles",
            envelope=envelope,
        )
    return MediaSetValue(
        tuple(envelope.data),
        tuple(_decode_links(item, envelope) for item in envelope.links),
        **_scoped(envelope),
    )


def _decode_links(raw: Any, envelope: ValueEnvelope) -> Links:
    if not isinstance(raw, Mapping):
        raise DecodeError("media links must be an object", envelope=envelope)
    try:
        return Links.model_validate(dict(raw))
    except ValidationError as exc:
        raise DecodeError(f"media links are invalid: {exc}", envelope=envelope) from exc


def _decode_select(envelope: ValueEnvelope) -> SimpleSelectValue | MultiSelectValue:
    if not isinstance(envelope.linked_data, Mapping):
        raise DecodeError("linked_data must be an object", envelope=envelope)
    if _is_optional_str(envelope.data):
        return SimpleSelectValue(
            envelope.data,
            _decode_linked_data(envelope.linked_data, envelope),
            **_scoped(envelope),
        )
    if _is_str_sequence(envelope.data):
        bundles = {
            str(code): _decode_linked_data(bundle, envelope) for code, bundle in envelope.linked_data.items()
        }
        return MultiSelectValue(tuple(envelope.data), MappingProxyType(bundles), **_scoped(envelope))
    raise DecodeError("select data must be an option code or a list of option codes", envelope=envelope)


def _decode_linked_data(raw: Any, envelope: ValueEnvelope) -> LinkedData:
    if not isinstance(raw, Mapping):
        raise DecodeError("linked_data bundle must be an object", envelope=envelope)
    labels = raw.get("labels") or {}
    if not isinstance(labels, Mapping):
        raise DecodeError("linked_data labels must be an object", envelope=envelope)
    return LinkedData(
        attribute=str(raw.get("attribute") or ""),
        code=str(raw.get("code") or ""),
        labels=MappingProxyType({str(k): str(v) for k, v in labels.items() if v is not None}),
    )


def _decode_plain(envelope: ValueEnvelope) -> AttributeValue:
    data = envelope.data
    if _is_optional_str(data):
        return TextValue(data, **_scoped(envelope))
    if _is_str_sequence(data):
        return TextCollectionValue(tuple(data), **_scoped(envelope))
    if isinstance(data, bool):
        return BooleanValue(data, **_scoped(envelope))
    if isinstance(data, int):
        return NumberValue(data, **_scoped(envelope))
    if isinstance(data, Mapping) and "unit" in data and "amount" in data:
        unit = data["unit"]
        if not isinstance(unit, str):
            raise DecodeError("metric unit must be a string", envelope=envelope)
        return MetricValue(_decode_amount(data["amount"], envelope), unit, **_scoped(envelope))
    if _is_mapping_sequence(data):
        if "currency" in data[0]:
            return PriceValue(tuple(_decode_price(item, envelope) for item in data), **_scoped(envelope))
        return TableValue(tuple(MappingProxyType(dict(row)) for row in data), **_scoped(envelope))
    raise DecodeError(f"unrecognised attribute value shape: {type(data).__name__}", envelope=envelope)


def _decode_price(item: Mapping[str, Any], envelope: ValueEnvelope) -> Price:
    currency = item.get("currency")
    if not isinstance(currency, str):
        raise DecodeError("price currency must be a string", envelope=envelope)
    return Price(_decode_amount(item.get("amount"), envelope), currency)


def _decode_amount(raw: Any, envelope: ValueEnvelope) -> Amount | None:
    try:
        return Amount.from_wire_optional(raw)
    except DecodeError as exc:
        raise DecodeError(exc.message, envelope=envelope) from exc
