"""Application registry, registered services and providers."""

from mantle.application.app import Application, ApplicationState, ConfigureFunction
from mantle.application.provider import (
    Binding,
    ProtocolType,
    Provider,
    ProviderFunction,
    TransportType,
)
from mantle.application.service import (
    ApplicationService,
    ServiceDefinition,
    ServiceMethod,
)

__all__ = [
    "Application",
    "ApplicationState",
    "ConfigureFunction",
    "Binding",
    "ProtocolType",
    "Provider",
    "ProviderFunction",
    "TransportType",
    "ApplicationService",
    "ServiceDefinition",
    "ServiceMethod",
]
