"""Signal decision logic.

Public API:
- SignalDecider: stateful crossover/threshold state machine
- decide_signal: pure transition function
- register_policy / get_policy / list_policies: EMA policy registry

Importing this package registers the built-in policies.
"""

from signal_core.strategy.registry import (
    PolicyFn,
    register_policy,
    get_policy,
    list_policies,
)
from signal_core.strategy.decider import SignalDecider, decide_signal

# Import built-in policies to trigger registration
import signal_core.strategy.policies  # noqa: F401

__all__ = [
    "PolicyFn",
    "register_policy",
    "get_policy",
    "list_policies",
    "SignalDecider",
    "decide_signal",
]
