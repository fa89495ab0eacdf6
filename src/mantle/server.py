"""Request context passed by transports as service infrastructure."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

RequestT = TypeVar("RequestT")


@dataclass(frozen=True)
class RequestEnv:
    """Environment of a single request.

    Attributes:
        epoch: Time the transport received the request (seconds since epoch)
        variables: Transport-specific variables (e.g. route or tenant info)
    """

    epoch: float = field(default_factory=time.time)
    variables: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestContext(Generic[RequestT]):
    """Native request of a transport and its environment.

    Attributes:
        req: The transport's native request object
        env: Request environment
    """

    req: RequestT
    env: RequestEnv = field(default_factory=RequestEnv)

    def variable(self, name: str, default: Any = None) -> Any:
        return self.env.variables.get(name, default)
