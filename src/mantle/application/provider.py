"""Protocol/transport providers and service bindings.

A provider binds a registered service to a concrete entry point (e.g. an
HTTP route). It is described by an application protocol ``type`` and an
optional architectural ``style``:

    fn(app, service, binding | None, infrastructure) -> None

A binding is what a service declares to select a provider; any extra
options it carries are passed through to the provider function.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mantle.application.app import Application
    from mantle.application.service import ApplicationService

ProviderFunction = Callable[["Application", "ApplicationService", "Binding | None", Any], None]


class ProtocolType(str, Enum):
    """Application layer protocol of a provider."""

    HTTP = "HTTP"
    WebSocket = "WebSocket"


# Transports and protocols share the same descriptor shape
TransportType = ProtocolType


def type_label(value: Any) -> str:
    """Display form of a provider type (enum value or plain string)."""
    return str(getattr(value, "value", value))


@dataclass(frozen=True)
class Binding:
    """Provider selection declared by a service.

    Attributes:
        type: Protocol type to match exactly
        style: Architectural style to match exactly (any style when None)
        options: Freeform options passed to the provider function
    """

    type: ProtocolType | str
    style: str | None = None
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Binding | Mapping[str, Any]) -> Binding:
        """Create a Binding from a Binding or a ``{type, style, **options}`` mapping."""
        if isinstance(value, Binding):
            return value
        if not isinstance(value, Mapping) or "type" not in value:
            raise TypeError(f"Invalid binding descriptor: {value!r}")
        options = {k: v for k, v in value.items() if k not in ("type", "style", "options")}
        options.update(value.get("options") or {})
        return cls(type=value["type"], style=value.get("style"), options=options)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a binding option."""
        return self.options.get(key, default)


@dataclass(frozen=True)
class Provider:
    """Protocol/transport provider attached to an application.

    Attributes:
        type: Protocol type served by this provider
        fn: Function binding a service to the provider
        style: Architectural style (e.g. REST, RPC)
    """

    type: ProtocolType | str
    fn: ProviderFunction
    style: str | None = None

    @classmethod
    def from_value(cls, value: Provider | Mapping[str, Any]) -> Provider:
        """Create a Provider from a Provider or a ``{type, style, fn}`` mapping."""
        if isinstance(value, Provider):
            return value
        if not isinstance(value, Mapping) or "type" not in value or not callable(value.get("fn")):
            raise TypeError(f"Invalid provider descriptor: {value!r}")
        return cls(type=value["type"], fn=value["fn"], style=value.get("style"))

    def matches(self, binding: Binding) -> bool:
        """Check whether this provider satisfies a binding."""
        if self.type != binding.type:
            return False
        return binding.style is None or self.style == binding.style
