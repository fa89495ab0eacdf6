"""Service envelopes and the hook pipeline.

Formal Model:
    hook(h)(fn)               wraps fn with h.before / h.after / h.error
    pipe([h1, ..., hn])(fn) = h1(h2(...hn(fn)))

    before phases run h1..hn, after phases run hn..h1.
"""

from mantle.service.error import ServiceError, ServiceErrorType
from mantle.service.hook import (
    HookDefinition,
    HookFunction,
    ServiceFunction,
    get_hook_definition,
    service_hook,
)
from mantle.service.pipe import service_pipe
from mantle.service.request import ServiceRequest
from mantle.service.response import (
    ServiceResponse,
    ServiceResponseDraft,
    ServiceResponseType,
    create_response,
)

__all__ = [
    "ServiceError",
    "ServiceErrorType",
    "HookDefinition",
    "HookFunction",
    "ServiceFunction",
    "get_hook_definition",
    "service_hook",
    "service_pipe",
    "ServiceRequest",
    "ServiceResponse",
    "ServiceResponseDraft",
    "ServiceResponseType",
    "create_response",
]
