"""Service definitions and registered application services.

An ApplicationService wraps the service function of a ServiceDefinition,
derives its identity (operation id, method, resource) and runs the global
and service hooks around the function on every call.
"""

from __future__ import annotations

import functools
import logging
import re
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import FrozenInstanceError, dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

import inflect

from mantle.application.provider import Binding
from mantle.exceptions import InvalidMethodError, InvalidOperationIdError, InvalidResourceError
from mantle.service.hook import HookDefinition, HookFunction, service_hook
from mantle.service.pipe import service_pipe
from mantle.service.request import ServiceRequest
from mantle.service.response import AnyServiceResponse

if TYPE_CHECKING:
    from mantle.application.app import Application

logger = logging.getLogger(__name__)

# Names that do not identify a function
_PLACEHOLDER_NAMES = frozenset({"", "<lambda>", "fn"})

_inflect = inflect.engine()


class ServiceMethod(str, Enum):
    GET = "get"
    FIND = "find"
    SEARCH = "search"
    CREATE = "create"
    UPDATE = "update"
    PATCH = "patch"
    REMOVE = "remove"


SetupFunction = Callable[["Application"], Any]


@dataclass
class ServiceDefinition:
    """Unit of registration for an application.

    Attributes:
        fn: The service function; must be named when no id is provided
        id: Operation id, unique throughout the application
        hooks: Hooks run around the service function
        resource: Resource group (defaults to the pluralized subject of the name)
        method: Service method (defaults to the leading verb of the name)
        setup: Called once with the application when the service is setup
        bindings: Provider bindings (protocol type, style and options)
    """

    fn: Callable[..., Any]
    id: str | None = None
    hooks: list[HookDefinition | Mapping[str, Any]] = field(default_factory=list)
    resource: str | None = None
    method: ServiceMethod | str | None = None
    setup: SetupFunction | None = None
    bindings: list[Binding | Mapping[str, Any]] = field(default_factory=list)

    @classmethod
    def from_value(cls, value: ServiceDefinition | Mapping[str, Any]) -> ServiceDefinition:
        """Create a ServiceDefinition from a definition or a mapping with the same keys."""
        if isinstance(value, ServiceDefinition):
            return value
        if not isinstance(value, Mapping) or not callable(value.get("fn")):
            raise TypeError(f"Invalid service definition: {value!r}")
        return cls(**value)


def split_name(name: str | None) -> list[str]:
    """Split a camelCase or snake_case name into lowercase words."""
    if not isinstance(name, str):
        return []
    snake = re.sub(r"([A-Z]+)([A-Z][a-z\d]+)", r"\1_\2", name)
    snake = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", snake)
    return [part.lower() for part in re.split(r"[_\-\s]+", snake) if part]


def parse_verb(name: str | None) -> str | None:
    words = split_name(name)
    return words[0] if words else None


def parse_subject(name: str | None) -> str | None:
    words = split_name(name)
    return words[1] if len(words) >= 2 else None


def pluralize(word: str) -> str:
    """Pluralize a resource name, leaving plural words unchanged."""
    plural = _inflect.plural_noun(word)
    # Singular nouns ending in "s" (address, status, analysis) inflect to "-es"/"-ses";
    # a bare trailing "s" on a word that already singularizes means it is plural
    if _inflect.singular_noun(word) and plural == f"{word}s":
        return word
    return plural


def _as_method(value: Any) -> ServiceMethod | None:
    try:
        return ServiceMethod(value)
    except ValueError:
        return None


def _fn_name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__name__", "") or ""


def get_operation_id(definition: ServiceDefinition) -> str:
    """Derive the operation id from the id or the function name.

    Raises:
        InvalidOperationIdError: If there is no id and the function is anonymous
    """
    if definition.id:
        return definition.id
    name = _fn_name(definition.fn)
    if name in _PLACEHOLDER_NAMES:
        raise InvalidOperationIdError()
    return name


def get_method(definition: ServiceDefinition) -> ServiceMethod:
    """Derive the method from the method field, the function name or the id.

    Raises:
        InvalidMethodError: If an explicit method is invalid or none can be derived
    """
    if definition.method:
        method = _as_method(definition.method)
        if method is None:
            raise InvalidMethodError()
        return method

    method = _as_method(parse_verb(_fn_name(definition.fn))) or _as_method(parse_verb(definition.id))
    if method is None:
        raise InvalidMethodError()
    return method


def get_resource(definition: ServiceDefinition) -> str:
    """Derive the resource from the resource field, the function name or the id.

    Raises:
        InvalidResourceError: If no resource can be derived
    """
    if definition.resource:
        return definition.resource

    subject = parse_subject(_fn_name(definition.fn)) or parse_subject(definition.id)
    if not subject:
        raise InvalidResourceError()
    return pluralize(subject)


def as_hook_definitions(
    hook_or_hooks: HookDefinition | Mapping[str, Any] | Iterable[HookDefinition | Mapping[str, Any]],
) -> list[HookDefinition]:
    if isinstance(hook_or_hooks, HookDefinition | Mapping):
        return [HookDefinition.from_value(hook_or_hooks)]
    return [HookDefinition.from_value(h) for h in hook_or_hooks]


class ApplicationService:
    """A service registered with an application.

    Calling the instance runs the service function through the global hooks
    of the application followed by its own hooks. Attributes cannot be
    reassigned after construction.

    Attributes:
        app: Owning application
        definition: The service definition
        service: The service function
        operation_id: Unique operation id
        method: Service method
        resource: Resource group
        bindings: Provider bindings
    """

    def __init__(
        self,
        app: Application,
        definition: ServiceDefinition | Mapping[str, Any],
        *bindings: Binding | Mapping[str, Any],
    ) -> None:
        definition = ServiceDefinition.from_value(definition)
        set_ = functools.partial(object.__setattr__, self)

        set_("app", app)
        set_("definition", definition)
        set_("service", definition.fn)
        set_("operation_id", get_operation_id(definition))
        set_("method", get_method(definition))
        set_("resource", get_resource(definition))
        set_(
            "bindings",
            tuple(Binding.from_value(b) for b in [*definition.bindings, *bindings]),
        )

        # Retain the original function name for introspection
        name = _fn_name(definition.fn) or self.operation_id
        set_("__name__", name)
        set_("__qualname__", getattr(definition.fn, "__qualname__", name))
        set_("__doc__", getattr(definition.fn, "__doc__", None))
        set_("__wrapped__", definition.fn)

        set_("_hook_functions", [service_hook(h) for h in as_hook_definitions(definition.hooks)])
        set_("_setup_done", False)
        set_("_lock", threading.Lock())
        set_("_frozen", True)

        logger.debug(
            "Created service '%s' (method=%s, resource=%s)",
            self.operation_id,
            self.method.value,
            self.resource,
        )

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise FrozenInstanceError(f"cannot assign to field '{name}' of ApplicationService")
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        raise FrozenInstanceError(f"cannot delete field '{name}' of ApplicationService")

    def __repr__(self) -> str:
        return (
            f"ApplicationService(operation_id={self.operation_id!r}, "
            f"method={self.method.value!r}, resource={self.resource!r})"
        )

    @property
    def name(self) -> str:
        """Original name of the service function."""
        return self.__name__

    @property
    def transports(self) -> tuple[Binding, ...]:
        return self.bindings

    @property
    def protocols(self) -> tuple[Binding, ...]:
        return self.bindings

    @property
    def is_setup(self) -> bool:
        return self._setup_done

    def hooks(
        self,
        hook_or_hooks: HookDefinition | Mapping[str, Any] | Sequence[HookDefinition | Mapping[str, Any]],
    ) -> ApplicationService:
        """Append one or more hooks to this service.

        Args:
            hook_or_hooks: A hook definition or a list of them, in before-phase order

        Returns:
            This service, for chaining
        """
        self._hook_functions.extend(service_hook(h) for h in as_hook_definitions(hook_or_hooks))
        return self

    def get_hooks(self) -> list[HookFunction]:
        """Get a copy of this service's hook functions."""
        return list(self._hook_functions)

    def setup(self) -> ApplicationService:
        """Run the definition's setup callback once.

        Returns:
            This service, for chaining
        """
        if self._setup_done:
            return self
        with self._lock:
            if self._setup_done:
                return self
            object.__setattr__(self, "_setup_done", True)
            if self.definition.setup is not None:
                logger.debug("Running setup for service '%s'", self.operation_id)
                self.definition.setup(self.app)
        return self

    async def __call__(
        self,
        request: ServiceRequest | None = None,
        infrastructure: Any = None,
    ) -> AnyServiceResponse:
        """Invoke the service through the global and service hooks.

        Args:
            request: The service request
            infrastructure: External context passed untouched to the service function

        Returns:
            The service response; errors are returned as ERROR responses
        """
        if request is None:
            request = ServiceRequest()

        chain = [*self.app.get_hooks(), *self.get_hooks(), service_hook(HookDefinition(name=self.operation_id))]
        logger.debug("Invoking service '%s' through %d hook(s)", self.operation_id, len(chain) - 1)
        return await service_pipe(chain)(self._bind(infrastructure))(request)

    def _bind(self, infrastructure: Any) -> Callable[[ServiceRequest], Any]:
        fn = self.service

        @functools.wraps(fn)
        def target(request: ServiceRequest) -> Any:
            if infrastructure is None:
                return fn(request)
            return fn(request, infrastructure)

        return target
