"""
FlowLynk - step-protocol agents on top of OpenAI-compatible chat models

This package provides:
- A JSON step protocol (initialization, custom, action, demand, output)
- An async orchestration loop that runs tools on the model's behalf
- An OpenAI-compatible chat client and a system prompt builder
- Interactive CLI for testing
"""

from .errors import (
    ConfigurationError,
    EmptyResponseError,
    FlowLynkError,
    ParseError,
    ProtocolViolation,
    ToolExecutionError,
    ToolNotFound,
    TransportError,
)
from .llm_call import CallableChatClient, ChatClient, ModelParameters, OpenAIChatClient
from .models import AgentProfile, CustomStep, Example, Message, Role, Step, StepKind
from .orchestration import OrchestrationLoop, OrchestrationResult
from .orchestrator import create_agent, run_query
from .tools import FunctionTool, Tool, ToolRegistry

__all__ = [
    "ConfigurationError",
    "EmptyResponseError",
    "FlowLynkError",
    "ParseError",
    "ProtocolViolation",
    "ToolExecutionError",
    "ToolNotFound",
    "TransportError",
    "CallableChatClient",
    "ChatClient",
    "ModelParameters",
    "OpenAIChatClient",
    "AgentProfile",
    "CustomStep",
    "Example",
    "Message",
    "Role",
    "Step",
    "StepKind",
    "OrchestrationLoop",
    "OrchestrationResult",
    "create_agent",
    "run_query",
    "FunctionTool",
    "Tool",
    "ToolRegistry",
]

__version__ = "0.1.0"
