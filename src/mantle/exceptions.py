"""Public exceptions for mantle.

Registration and setup errors are configuration mistakes: they are raised
synchronously from ``Application.use()`` / ``Application.setup()`` and are
never converted into service responses.
"""


class MantleError(Exception):
    """Base exception for all mantle errors."""


class MantleConfigError(MantleError):
    """Configuration error (unreadable file, bad hook import path)."""


class RegistrationError(MantleError):
    """A service definition cannot be turned into an application service."""


class InvalidMethodError(RegistrationError):
    """The service method is not a valid ServiceMethod and cannot be derived."""

    def __init__(
        self,
        message: str = (
            "The service definition method is invalid. The method property or the first verb in "
            "the service name or operation Id must be a valid ServiceMethod."
        ),
    ) -> None:
        super().__init__(message)


class InvalidResourceError(RegistrationError):
    """The service resource cannot be derived."""

    def __init__(
        self,
        message: str = (
            "The service definition resource is invalid. A resource is required when no named fn "
            "service and no operation Id properties are provided."
        ),
    ) -> None:
        super().__init__(message)


class InvalidOperationIdError(RegistrationError):
    """The operation id is missing and cannot be derived from the function."""

    def __init__(
        self,
        message: str = "The service definition must provide an id property if the fn is not a named function.",
    ) -> None:
        super().__init__(message)


class SetupError(MantleError):
    """The registered services and providers are structurally inconsistent."""


class NoProviderConfiguredError(SetupError):
    """No provider has been attached to the application."""

    def __init__(self, message: str = "No provider configured") -> None:
        super().__init__(message)


class AmbiguousDefaultProviderError(SetupError):
    """A service without bindings cannot choose among several providers."""

    def __init__(self, message: str = "More than one default provider configured") -> None:
        super().__init__(message)


class ProviderNotFoundError(SetupError):
    """No provider matches a service binding."""

    def __init__(self, type_: str, style: str | None = None) -> None:
        self.type = type_
        self.style = style
        super().__init__(f"No provider found for {_describe(type_, style)}")


class AmbiguousProviderError(SetupError):
    """More than one provider matches a service binding."""

    def __init__(self, type_: str, style: str | None = None) -> None:
        self.type = type_
        self.style = style
        super().__init__(f"More than one provider found for {_describe(type_, style)}")


class ProviderLockedError(SetupError):
    """Providers cannot be attached once the application has been setup."""

    def __init__(self, message: str = "Cannot attach provider after application has been setup") -> None:
        super().__init__(message)


class ListenError(MantleError):
    """The application has no transport able to listen."""

    def __init__(self, message: str = "No provider attached to start listening") -> None:
        super().__init__(message)


def _describe(type_: str, style: str | None) -> str:
    if style:
        return f"type {type_} and style {style}"
    return f"type {type_}"
