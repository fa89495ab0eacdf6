"""Hook definition and hook wrapper.

A hook wraps one service function with a single before/after/error
interceptor:

    before(request)            -> request | None
    after(request, response)   -> response | None
    error(request, response)   -> response | None

Returning None means "no change". Any exception raised while running the
hook or the wrapped function is converted into an ERROR response, so a
wrapped function never raises.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from mantle.service.request import ServiceRequest
from mantle.service.response import AnyServiceResponse, error_response, is_response

logger = logging.getLogger(__name__)

# Type aliases
ServiceFunction = Callable[[ServiceRequest], Awaitable[AnyServiceResponse]]
HookFunction = Callable[[ServiceFunction], ServiceFunction]
BeforeFn = Callable[[ServiceRequest], Any]
AfterFn = Callable[[ServiceRequest, AnyServiceResponse], Any]
ErrorFn = Callable[[ServiceRequest, AnyServiceResponse], Any]


@dataclass(frozen=True)
class HookDefinition:
    """Interceptors run around a service function.

    Attributes:
        before: Runs before the function; may replace the request
        after: Runs after a successful response; may replace it
        error: Runs on a failed response; may replace it
        name: Label used in logs and pipeline listings
    """

    before: BeforeFn | None = None
    after: AfterFn | None = None
    error: ErrorFn | None = None
    name: str | None = None

    @classmethod
    def from_value(cls, value: HookDefinition | Mapping[str, Any]) -> HookDefinition:
        """Create a HookDefinition from a definition or a ``{before, after, error}`` mapping."""
        if isinstance(value, HookDefinition):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Invalid hook definition: {value!r}")
        unknown = set(value) - {"before", "after", "error", "name"}
        if unknown:
            raise TypeError(f"Invalid hook definition keys: {sorted(unknown)}")
        return cls(**value)

    @property
    def label(self) -> str:
        """Name for introspection, falling back to the interceptor names."""
        if self.name:
            return self.name
        for fn in (self.before, self.after, self.error):
            fn_name = getattr(fn, "__name__", "")
            if fn_name and fn_name != "<lambda>":
                return fn_name
        return "anonymous"


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def service_hook(definition: HookDefinition) -> HookFunction:
    """Create a hook function from a hook definition.

    Args:
        definition: Interceptors to run around the service function

    Returns:
        Function that wraps a service function and keeps its name
    """

    def decorator(fn: ServiceFunction) -> ServiceFunction:
        @functools.wraps(fn)
        async def hooked(request: ServiceRequest) -> AnyServiceResponse:
            hook_name = definition.label
            try:
                if definition.before is not None:
                    logger.debug("Hook '%s': calling before handler", hook_name)
                    request = await _resolve(definition.before(request)) or request

                # Request errors (e.g. validation) skip the service function
                if getattr(request, "error", None) is not None:
                    logger.debug("Hook '%s': creating error response from request error", hook_name)
                    response = error_response(request.error)
                else:
                    response = await _resolve(fn(request))
                    if not is_response(response):
                        raise TypeError(
                            f"Service function '{getattr(fn, '__name__', fn)}' returned "
                            f"{type(response).__name__}, expected a ServiceResponse"
                        )

                if response.success and definition.after is not None:
                    logger.debug("Hook '%s': calling after handler", hook_name)
                    response = await _resolve(definition.after(request, response)) or response

            except Exception as e:
                logger.debug(
                    "Hook '%s': creating error response from exception %s: %s",
                    hook_name,
                    type(e).__name__,
                    str(e),
                )
                response = error_response(e)

            if not response.success and definition.error is not None:
                logger.debug("Hook '%s': calling error handler", hook_name)
                try:
                    response = await _resolve(definition.error(request, response)) or response
                except Exception as e:
                    logger.error(
                        "Hook '%s' error handler failed: %s: %s",
                        hook_name,
                        type(e).__name__,
                        str(e),
                    )
                    response = error_response(e)

            return response

        hooked._hook_definition = definition  # type: ignore[attr-defined]
        return hooked

    decorator._hook_definition = definition  # type: ignore[attr-defined]
    return decorator


def get_hook_definition(hook_fn: HookFunction) -> HookDefinition | None:
    """Get the definition a hook function was created from."""
    return getattr(hook_fn, "_hook_definition", None)
