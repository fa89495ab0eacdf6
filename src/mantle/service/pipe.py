"""Service pipe: folds hook functions into a single hook function."""

from __future__ import annotations

from collections.abc import Sequence
from functools import reduce

from mantle.service.hook import HookFunction, ServiceFunction


def service_pipe(hook_functions: Sequence[HookFunction]) -> HookFunction:
    """Compose hook functions into one, ``h1(h2(...hn(fn)))``.

    The first hook is the outermost layer: its before handler runs first
    and its after handler runs last.

    Args:
        hook_functions: Hook functions in before-phase order

    Returns:
        Hook function applying the whole chain
    """
    hooks = list(hook_functions)

    def pipe(service_function: ServiceFunction) -> ServiceFunction:
        return reduce(lambda svc, hook: hook(svc), reversed(hooks), service_function)

    return pipe
