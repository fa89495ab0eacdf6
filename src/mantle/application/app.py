"""Application registry.

Owns the registered services, the protocol/transport providers and the
global hooks. The application starts in the ACCEPTING state; ``setup()``
moves it to the SETUP state, after which providers are locked and every
newly registered service is resolved immediately.

Provider resolution for one service:
    1. run the service setup
    2. no providers                  -> NoProviderConfiguredError
    3. no bindings, one provider     -> invoke it
       no bindings, many providers   -> AmbiguousDefaultProviderError
    4. per binding (type and, when given, style match exactly):
       0 matches -> ProviderNotFoundError
       1 match   -> invoke it
       n matches -> AmbiguousProviderError
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

from mantle._version import __version__
from mantle.application.provider import Binding, Provider, type_label
from mantle.application.service import ApplicationService, ServiceDefinition, as_hook_definitions
from mantle.exceptions import (
    AmbiguousDefaultProviderError,
    AmbiguousProviderError,
    ListenError,
    NoProviderConfiguredError,
    ProviderLockedError,
    ProviderNotFoundError,
)
from mantle.service.hook import HookDefinition, HookFunction, service_hook

if TYPE_CHECKING:
    from mantle.config import MantleConfig

logger = logging.getLogger(__name__)

ConfigureFunction = Callable[["Application"], Any]
ProviderValue = Provider | Mapping[str, Any]


class ApplicationState(Enum):
    ACCEPTING = "accepting"
    SETUP = "setup"


class Application:
    """Registry of services, providers and global hooks.

    Attributes:
        infrastructure: External context passed to provider functions
    """

    def __init__(
        self,
        hooks: HookDefinition | Mapping[str, Any] | Sequence[HookDefinition | Mapping[str, Any]] | None = None,
        *,
        infrastructure: Any = None,
    ) -> None:
        self._services: dict[str, ApplicationService] = {}
        self._providers: list[Provider] = []
        self._hook_functions: list[HookFunction] = []
        self._state = ApplicationState.ACCEPTING
        self._lock = threading.RLock()
        self.infrastructure = infrastructure

        if hooks:
            self.hooks(hooks)

    def __repr__(self) -> str:
        return (
            f"Application(state={self._state.value}, services={len(self._services)}, "
            f"providers={len(self._providers)}, hooks={len(self._hook_functions)})"
        )

    @classmethod
    def from_config(cls, config: MantleConfig | None = None, **kwargs: Any) -> Application:
        """Create an application with the global hooks of a configuration.

        Args:
            config: Configuration (defaults to the global configuration)
            **kwargs: Additional keyword arguments for the constructor

        Returns:
            Application instance
        """
        from mantle.config import configure_logging, get_config

        config = config or get_config()
        configure_logging(config)
        app = cls(**kwargs)
        hooks = config.load_hooks()
        if hooks:
            app.hooks(hooks)
            logger.info("Loaded %d global hook(s) from configuration", len(hooks))
        return app

    @property
    def version(self) -> str:
        return __version__

    @property
    def state(self) -> ApplicationState:
        return self._state

    @property
    def is_setup(self) -> bool:
        return self._state is ApplicationState.SETUP

    @property
    def services(self) -> list[ApplicationService]:
        """Get all registered services in registration order."""
        return list(self._services.values())

    @property
    def providers(self) -> tuple[Provider, ...]:
        return tuple(self._providers)

    def service(self, operation_id: str) -> ApplicationService | None:
        """Get the service registered under an operation id.

        Args:
            operation_id: The id from the service definition or the function name

        Returns:
            ApplicationService or None if not registered
        """
        return self._services.get(operation_id)

    def use(
        self,
        definition: ServiceDefinition | Mapping[str, Any],
        *bindings: Binding | Mapping[str, Any],
    ) -> Application:
        """Register a service.

        When the application is already setup, the service is resolved
        immediately and registered only if resolution succeeds; a previously
        registered service with the same operation id is kept on failure.

        Args:
            definition: Service definition (or mapping with the same keys)
            *bindings: Provider bindings in addition to the definition's

        Returns:
            This application, for chaining

        Raises:
            RegistrationError: If the service identity cannot be derived
            SetupError: If the application is setup and the service cannot be resolved
        """
        service = ApplicationService(self, definition, *bindings)

        with self._lock:
            # Once setup, only services that resolve are registered
            if self._state is ApplicationState.SETUP:
                self._resolve(service)

            if service.operation_id in self._services:
                logger.warning("Service '%s' is already registered, replacing it", service.operation_id)
            self._services[service.operation_id] = service
            logger.debug("Registered service '%s'", service.operation_id)

        return self

    def hooks(
        self,
        hook_or_hooks: HookDefinition | Mapping[str, Any] | Sequence[HookDefinition | Mapping[str, Any]],
    ) -> Application:
        """Append one or more global hooks.

        Global hooks wrap outside the hooks of every service.

        Returns:
            This application, for chaining
        """
        self._hook_functions.extend(service_hook(h) for h in as_hook_definitions(hook_or_hooks))
        return self

    def get_hooks(self) -> list[HookFunction]:
        """Get a copy of the global hook functions."""
        return list(self._hook_functions)

    def protocols(self, provider_or_providers: ProviderValue | Iterable[ProviderValue]) -> Application:
        """Attach one or more protocol providers.

        Returns:
            This application, for chaining

        Raises:
            ProviderLockedError: If the application has already been setup
        """
        if isinstance(provider_or_providers, Provider | Mapping):
            providers = [Provider.from_value(provider_or_providers)]
        else:
            providers = [Provider.from_value(p) for p in provider_or_providers]

        with self._lock:
            if self._state is ApplicationState.SETUP:
                raise ProviderLockedError()
            self._providers.extend(providers)

        for provider in providers:
            logger.debug(
                "Attached provider type=%s style=%s",
                type_label(provider.type),
                provider.style,
            )
        return self

    def attach_transport(self, provider: ProviderValue) -> Application:
        """Attach a transport provider (same contract as protocols)."""
        return self.protocols(provider)

    def configure(self, fn: ConfigureFunction) -> Application:
        """Call a configuration function (e.g. a plugin installer) with this application."""
        fn(self)
        return self

    def setup(self) -> Application:
        """Setup the application and resolve every registered service once.

        The application enters the SETUP state before services are resolved,
        in registration order. If a service fails to resolve, the services
        after it stay unbound and are not setup, providers remain locked and
        later calls to ``setup()`` do nothing.

        Returns:
            This application, for chaining

        Raises:
            SetupError: If a service cannot be resolved to a provider
        """
        if self._state is ApplicationState.SETUP:
            return self

        with self._lock:
            if self._state is ApplicationState.SETUP:
                return self
            self._state = ApplicationState.SETUP

            services = list(self._services.values())
            logger.info(
                "Setting up application: %d service(s), %d provider(s)",
                len(services),
                len(self._providers),
            )
            for service in services:
                self._resolve(service)

        return self

    async def listen(self, *args: Any, **kwargs: Any) -> Any:
        """Start listening; transports attaching a server override this."""
        raise ListenError()

    def _resolve(self, service: ApplicationService) -> None:
        """Run the service setup and bind it to its provider(s)."""
        service.setup()

        if not self._providers:
            raise NoProviderConfiguredError()

        if not service.bindings:
            if len(self._providers) > 1:
                raise AmbiguousDefaultProviderError()
            self._invoke(self._providers[0], service, None)
            return

        selected: list[tuple[Provider, Binding]] = []
        for binding in service.bindings:
            matches = [p for p in self._providers if p.matches(binding)]
            if not matches:
                raise ProviderNotFoundError(type_label(binding.type), binding.style)
            if len(matches) > 1:
                raise AmbiguousProviderError(type_label(binding.type), binding.style)
            selected.append((matches[0], binding))

        for provider, binding in selected:
            self._invoke(provider, service, binding)

    def _invoke(self, provider: Provider, service: ApplicationService, binding: Binding | None) -> None:
        logger.debug(
            "Binding service '%s' to provider type=%s style=%s",
            service.operation_id,
            type_label(provider.type),
            provider.style,
        )
        provider.fn(self, service, binding, self.infrastructure)
