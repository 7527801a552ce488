"""Provider lifecycle events.

Events are the only channel through which providers report state changes.
They are dispatched per scope (global or client) with an immutable
:class:`EventDetails` payload.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Union


class ProviderEvent(str, Enum):
    """Closed set of lifecycle event kinds."""

    READY = "PROVIDER_READY"
    ERROR = "PROVIDER_ERROR"
    STALE = "PROVIDER_STALE"
    CONFIGURATION_CHANGED = "PROVIDER_CONFIGURATION_CHANGED"

    @classmethod
    def parse(cls, kind: Union["ProviderEvent", str]) -> "ProviderEvent":
        """Coerce an event kind or its wire value.

        Raises:
            ValueError: If ``kind`` is not a known event kind.
        """
        if isinstance(kind, cls):
            return kind
        try:
            return cls(kind)
        except ValueError:
            try:
                return cls[str(kind).upper()]
            except KeyError:
                raise ValueError(f"Unknown provider event: {kind!r}") from None


class ProviderStatus(str, Enum):
    """Readiness of a registry slot."""

    NOT_READY = "NOT_READY"
    READY = "READY"
    ERROR = "ERROR"


_RESERVED = ("client_name", "message")


class EventDetails(Mapping[str, Any]):
    """
    Immutable payload attached to a dispatched event.

    Behaves as a read-only mapping over ``client_name``, ``message`` and any
    provider-supplied fields. ``client_name`` and ``message`` are also
    available as attributes.
    """

    __slots__ = ("_client_name", "_message", "_extra")

    def __init__(
        self,
        client_name: Optional[str] = None,
        message: Optional[str] = None,
        **extra: Any,
    ):
        self._client_name = client_name
        self._message = message
        self._extra = MappingProxyType(dict(extra))

    @classmethod
    def merge(cls, details: Optional[Mapping[str, Any]], client_name: Optional[str]) -> "EventDetails":
        """Build details from a provider payload, stamping the owning client name.

        The client name is applied last, so a provider cannot spoof it.
        """
        fields = dict(details or {})
        fields.pop("client_name", None)
        message = fields.pop("message", None)
        return cls(client_name=client_name, message=message, **fields)

    @property
    def client_name(self) -> Optional[str]:
        return self._client_name

    @property
    def message(self) -> Optional[str]:
        return self._message

    @property
    def extra(self) -> Mapping[str, Any]:
        """Provider-supplied fields."""
        return self._extra

    def _as_dict(self) -> dict[str, Any]:
        data = dict(self._extra)
        if self._message is not None:
            data["message"] = self._message
        data["client_name"] = self._client_name
        return data

    def __getitem__(self, key: str) -> Any:
        if key in _RESERVED:
            value = getattr(self, f"_{key}")
            if value is None and key == "message":
                raise KeyError(key)
            return value
        return self._extra[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._as_dict())

    def __len__(self) -> int:
        return len(self._as_dict())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return self._as_dict() == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self._client_name, self._message, tuple(sorted(self._extra))))

    def __repr__(self) -> str:
        return f"EventDetails({self._as_dict()!r})"

    def to_dict(self) -> dict[str, Any]:
        """Convert details to a plain dictionary for serialization."""
        return self._as_dict()
