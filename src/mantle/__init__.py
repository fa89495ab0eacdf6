"""mantle - service-dispatch engine.

Registers business functions as services, wraps them with before/after/error
hooks and binds them to protocol/transport providers:

    app = mantle()
    app.protocols(Provider(type=ProtocolType.HTTP, style="REST", fn=rest_binding))
    app.use(ServiceDefinition(fn=get_user, hooks=[auth_hook]))
    app.setup()

    response = await app.service("get_user")(ServiceRequest(params={"id": 1}))
"""

from typing import Any

from mantle._version import __version__
from mantle.application import (
    Application,
    ApplicationService,
    ApplicationState,
    Binding,
    ProtocolType,
    Provider,
    ServiceDefinition,
    ServiceMethod,
    TransportType,
)
from mantle.server import RequestContext, RequestEnv
from mantle.service import (
    HookDefinition,
    ServiceError,
    ServiceErrorType,
    ServiceRequest,
    ServiceResponse,
    ServiceResponseDraft,
    ServiceResponseType,
    create_response,
    service_hook,
    service_pipe,
)


def mantle(hooks: Any = None, **kwargs: Any) -> Application:
    """Create a new application."""
    return Application(hooks, **kwargs)


__all__ = [
    "__version__",
    "mantle",
    "Application",
    "ApplicationService",
    "ApplicationState",
    "Binding",
    "ProtocolType",
    "Provider",
    "ServiceDefinition",
    "ServiceMethod",
    "TransportType",
    "RequestContext",
    "RequestEnv",
    "HookDefinition",
    "ServiceError",
    "ServiceErrorType",
    "ServiceRequest",
    "ServiceResponse",
    "ServiceResponseDraft",
    "ServiceResponseType",
    "create_response",
    "service_hook",
    "service_pipe",
]
