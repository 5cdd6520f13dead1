"""
Agent profile models.

A profile carries everything about an agent that is not a tool: extra
instructions for the system prompt, predefined reasoning steps, worked
examples and a seed history.
"""

from dataclasses import dataclass, field
from typing import Optional

from .step import Message


@dataclass
class CustomStep:
    """A predefined reasoning step the model may use."""
    name: str
    purpose: str


@dataclass
class Example:
    """A worked example rendered into the system prompt."""
    user_query: str
    output: list[dict] = field(default_factory=list)


@dataclass
class AgentProfile:
    """Prompt-level configuration of an agent."""
    user_system_prompt: Optional[str] = None
    steps: list[CustomStep] = field(default_factory=list)
    examples: list[Example] = field(default_factory=list)
    history: list[Message] = field(default_factory=list)
