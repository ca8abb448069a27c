__version__ = "0.1.0"

from akeneo_client.core.config import PIM_VERSION_5, PIM_VERSION_6, PIM_VERSION_7, ClientSettings  # noqa: E402
from akeneo_client.schemas.common import Link, Links, MediaFile, Page, Violation  # noqa: E402
from akeneo_client.schemas.values import (  # noqa: E402
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
from akeneo_client.services.value_decoder import decode_value, decode_values  # noqa: E402
from akeneo_client.session import Session  # noqa: E402
from akeneo_client.transport.errors import (  # noqa: E402
    AkeneoClientError,
    AuthError,
    ConfigurationError,
    DecodeError,
    InvalidOptionsError,
    NotFoundError,
    RequestError,
    TransportError,
)
from akeneo_client.transport.query import CategoryListOptions, ListOptions, ProductListOptions, QueryOptions  # noqa: E402

__all__ = [
    "PIM_VERSION_5",
    "PIM_VERSION_6",
    "PIM_VERSION_7",
    "AkeneoClientError",
    "Amount",
    "AttributeValue",
    "AuthError",
    "BooleanValue",
    "CategoryListOptions",
    "ClientSettings",
    "ConfigurationError",
    "DecodeError",
    "InvalidOptionsError",
    "Link",
    "LinkedData",
    "Links",
    "ListOptions",
    "MediaFile",
    "MediaSetValue",
    "MediaValue",
    "MetricValue",
    "MultiSelectValue",
    "NotFoundError",
    "NumberValue",
    "Page",
    "Price",
    "PriceValue",
    "ProductListOptions",
    "QueryOptions",
    "RequestError",
    "Session",
    "SimpleSelectValue",
    "TableValue",
    "TextCollectionValue",
    "TextValue",
    "TransportError",
    "ValueEnvelope",
    "Violation",
    "__version__",
    "decode_value",
    "decode_values",
]
