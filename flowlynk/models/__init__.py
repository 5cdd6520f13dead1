"""
Data models for FlowLynk.
"""

from .step import (
    TERMINAL_KINDS,
    Message,
    Role,
    Step,
    StepKind,
    StepPayload,
    kind_for_label,
)
from .profile import AgentProfile, CustomStep, Example

__all__ = [
    # Step models
    "TERMINAL_KINDS",
    "Message",
    "Role",
    "Step",
    "StepKind",
    "StepPayload",
    "kind_for_label",
    # Profile models
    "AgentProfile",
    "CustomStep",
    "Example",
]
