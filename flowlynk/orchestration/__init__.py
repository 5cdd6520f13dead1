"""
Step-protocol orchestration loop.

The loop keeps a growing transcript, asks the model for one JSON step per
turn, runs tools for action steps and stops on output, demand or error.
"""

from .conversation import ConversationState
from .events import StepEvents, StepObserver
from .parser import parse_step, strip_code_fences, validate_step
from .loop import OrchestrationLoop, OrchestrationResult

__all__ = [
    "ConversationState",
    "StepEvents",
    "StepObserver",
    "parse_step",
    "strip_code_fences",
    "validate_step",
    "OrchestrationLoop",
    "OrchestrationResult",
]
