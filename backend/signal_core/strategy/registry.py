"""Registry of EMA decision policies.

Usage:
    @register_policy("my-policy")
    def my_policy(prev_short, prev_long, cur_short, cur_long) -> Signal:
        ...

    policy = get_policy("my-policy")
    names = list_policies()
"""

from __future__ import annotations

import logging
from typing import Callable

from signal_core.models.signal import Signal

logger = logging.getLogger(__name__)

# (prev_short, prev_long, cur_short, cur_long) -> Signal
PolicyFn = Callable[[float | None, float | None, float, float], Signal]

# Global registry: policy_name -> policy function
_REGISTRY: dict[str, PolicyFn] = {}


def register_policy(name: str):
    """Decorator to register a decision policy under a given name.

    Raises:
        ValueError: If a policy with the same name is already registered.
    """

    def decorator(fn: PolicyFn) -> PolicyFn:
        if name in _REGISTRY:
            raise ValueError(
                f"Policy '{name}' is already registered by {_REGISTRY[name].__name__}"
            )
        _REGISTRY[name] = fn
        logger.debug("Registered policy: %s -> %s", name, fn.__name__)
        return fn

    return decorator


def get_policy(name: str) -> PolicyFn:
    """Get a policy function by name.

    Raises:
        KeyError: If no policy is registered under the given name.
    """
    fn = _REGISTRY.get(name)
    if fn is None:
        available = ", ".join(sorted(_REGISTRY.keys())) or "(none)"
        raise KeyError(f"Unknown policy '{name}'. Available: {available}")
    return fn


def list_policies() -> list[str]:
    """Return a sorted list of registered policy names."""
    return sorted(_REGISTRY.keys())
