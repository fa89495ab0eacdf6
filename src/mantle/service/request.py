"""ServiceRequest dataclass.

A request is created once per invocation by the transport and travels
through every hook of the pipeline. Hooks may mutate it in place or
return a replacement.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from mantle.service.error import ServiceError

T = TypeVar("T")

_MISSING = object()


@dataclass
class ServiceRequest:
    """Input envelope for a service invocation.

    Attributes:
        data: Payload for create, update, patch, etc. operations
        params: Resource id, query and any additional parameters (may be nested)
        error: Request-level error (e.g. validation); short-circuits the service
    """

    data: Any = None
    params: dict[str, Any] = field(default_factory=dict)
    error: ServiceError | Any | None = None

    def get_param(self, name: str | Sequence[str], type_: Callable[[Any], T] | None = None) -> T | Any:
        """Get a parameter, drilling into nested params when given a path.

        Args:
            name: Parameter name, or a sequence of names forming a path
            type_: Optional converter applied when the value exists

        Returns:
            The (converted) value, or None when the parameter is absent
        """
        value = _get_path(self.params, _as_path(name))
        if value is _MISSING:
            return None
        if type_ is not None:
            return type_(value)
        return value

    def get_first_param(
        self,
        names: Sequence[str | Sequence[str]],
        type_: Callable[[Any], T] | None = None,
    ) -> T | Any:
        """Get the first parameter found among several names or paths."""
        for name in names:
            value = _get_path(self.params, _as_path(name))
            if value is _MISSING:
                continue
            if type_ is not None:
                return type_(value)
            return value
        return None

    def get_param_as_number(self, name: str | Sequence[str]) -> int | float | None:
        return self.get_param(name, to_number)

    def get_param_as_number_array(self, name: str | Sequence[str]) -> list[int | float] | None:
        return self.get_param(name, to_number_array)


def to_number(value: Any) -> int | float:
    """Convert a scalar (usually a query string value) to int or float."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int | float):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def to_number_array(value: Any) -> list[int | float]:
    """Convert a scalar or a sequence of scalars to a list of numbers."""
    if isinstance(value, str) or not isinstance(value, Sequence):
        return [to_number(value)]
    return [to_number(v) for v in value]


def _as_path(name: str | Sequence[str]) -> list[str]:
    if isinstance(name, str):
        return [name]
    return list(name)


def _get_path(params: Any, path: list[str]) -> Any:
    current = params
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return _MISSING
        current = current[key]
    return current
