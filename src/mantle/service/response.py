"""Service response envelopes.

Two distinct types model the freeze-after-construction lifecycle:

- ``ServiceResponse``: finalized, read-only (assignment raises
  ``dataclasses.FrozenInstanceError``)
- ``ServiceResponseDraft``: mutable, finalized with ``freeze()``

``create_response()`` is the builder that returns one or the other.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar


class ServiceResponseType(IntEnum):
    """Outcome kinds of a service invocation.

    The set is open: any other integer is accepted as a custom kind and
    counts as a success.
    """

    ERROR = -1
    UNKNOWN = 0
    SUCCESS = 1
    QUEUED = 2
    CREATED = 3
    ACCEPTED = 4


_FAILURE_TYPES = frozenset({ServiceResponseType.ERROR, ServiceResponseType.UNKNOWN})


def coerce_response_type(value: int | None) -> ServiceResponseType | int:
    """Normalize a response kind, keeping unknown integers as custom kinds."""
    if value is None:
        return ServiceResponseType.UNKNOWN
    try:
        return ServiceResponseType(value)
    except ValueError:
        return int(value)


def is_success_type(value: int) -> bool:
    return value not in _FAILURE_TYPES


@dataclass(frozen=True)
class ServiceResponse:
    """Finalized response of a service invocation.

    Attributes:
        type: Outcome kind (ServiceResponseType or a custom integer)
        payload: Success value or error value
    """

    type: ServiceResponseType | int = ServiceResponseType.UNKNOWN
    payload: Any = None

    frozen: ClassVar[bool] = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", coerce_response_type(self.type))

    @property
    def success(self) -> bool:
        return is_success_type(self.type)

    def evolve(self, **changes: Any) -> ServiceResponse:
        """Build a new frozen response with some fields replaced."""
        return dataclasses.replace(self, **changes)

    def thaw(self) -> ServiceResponseDraft:
        """Get a mutable copy of this response."""
        return ServiceResponseDraft(type=self.type, payload=self.payload)


@dataclass
class ServiceResponseDraft:
    """Mutable response used while a response is still being built."""

    type: ServiceResponseType | int = ServiceResponseType.UNKNOWN
    payload: Any = None

    frozen: ClassVar[bool] = False

    def __post_init__(self) -> None:
        self.type = coerce_response_type(self.type)

    @property
    def success(self) -> bool:
        return is_success_type(self.type)

    def freeze(self) -> ServiceResponse:
        """Finalize the draft into a read-only response."""
        return ServiceResponse(type=self.type, payload=self.payload)


AnyServiceResponse = ServiceResponse | ServiceResponseDraft


def create_response(
    type: ServiceResponseType | int | None = None,
    payload: Any = None,
    *,
    freeze: bool = True,
) -> AnyServiceResponse:
    """Build a response, frozen by default.

    Args:
        type: Outcome kind (defaults to UNKNOWN)
        payload: Success value or error value
        freeze: Return a read-only ServiceResponse when True, else a draft

    Returns:
        ServiceResponse or ServiceResponseDraft
    """
    kind = coerce_response_type(type)
    if freeze:
        return ServiceResponse(type=kind, payload=payload)
    return ServiceResponseDraft(type=kind, payload=payload)


def error_response(payload: Any) -> ServiceResponse:
    return ServiceResponse(type=ServiceResponseType.ERROR, payload=payload)


def is_response(value: Any) -> bool:
    return isinstance(value, ServiceResponse | ServiceResponseDraft)
