"""Request-level service errors.

A ServiceError is what a ``before`` hook places on ``request.error`` to stop
the pipeline (e.g. on validation failure). Transports translate its
``type`` into their own status codes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ServiceErrorType(str, Enum):
    NOT_FOUND = "NotFoundError"
    DATA_ACCESS_ERROR = "DataAccessError"
    INSUFFICIENT_RIGHTS = "InsufficientRightsError"
    UNEXPECTED = "UnexpectedError"
    VALIDATION = "ValidationError"
    STATE_CONFLICT = "StateConflictError"


@dataclass(frozen=True)
class ServiceError:
    """Read-only description of a failed request.

    Attributes:
        type: Error kind (ServiceErrorType or any transport-known string)
        message: Human readable message
        inner: Underlying exception, if any
        data: Extra details (e.g. field validation messages)
    """

    type: ServiceErrorType | str = ServiceErrorType.UNEXPECTED
    message: str = ""
    inner: BaseException | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def unexpected(cls, exc: BaseException) -> ServiceError:
        """Wrap an unexpected exception."""
        return cls(type=ServiceErrorType.UNEXPECTED, message=str(exc), inner=exc)

    @classmethod
    def validation(cls, message: str, **data: Any) -> ServiceError:
        return cls(type=ServiceErrorType.VALIDATION, message=message, data=data)

    @classmethod
    def not_found(cls, message: str) -> ServiceError:
        return cls(type=ServiceErrorType.NOT_FOUND, message=message)
