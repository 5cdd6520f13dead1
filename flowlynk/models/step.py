"""
Step and message models.

A ``Step`` is one structured output of the model (or a step synthesized by
the loop for tool outcomes and errors).  ``StepPayload`` is the pydantic
schema of the JSON object the model is asked to produce.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class StepKind(str, Enum):
    """Kinds of step understood by the orchestration loop."""

    INITIATE = "initialization"
    CUSTOM = "custom"
    ACTION = "action"
    DEMAND = "demand"
    OUTPUT = "output"
    ERROR = "error"
    # Synthesized by the loop for a successful tool outcome, never parsed.
    OBSERVE = "observe"


TERMINAL_KINDS = frozenset({StepKind.OUTPUT, StepKind.DEMAND, StepKind.ERROR})

# Step labels the model may use, mapped to their kind. Anything else is custom.
_LABEL_KINDS = {
    "initialization": StepKind.INITIATE,
    "initiate": StepKind.INITIATE,
    "action": StepKind.ACTION,
    "demand": StepKind.DEMAND,
    "output": StepKind.OUTPUT,
    "error": StepKind.ERROR,
}


def kind_for_label(label: str) -> StepKind:
    """Map a wire step label to its StepKind."""
    return _LABEL_KINDS.get(label.strip().lower(), StepKind.CUSTOM)


@dataclass
class Step:
    """A single step of a run."""

    kind: StepKind
    name: str = ""
    content: str = ""
    tool_name: Optional[str] = None
    tool_input: Optional[dict] = None
    success: Optional[bool] = None

    def __post_init__(self):
        if not self.name:
            if self.kind is StepKind.CUSTOM:
                raise ValueError("custom steps need a name")
            self.name = self.kind.value

        has_name = self.tool_name is not None
        has_input = self.tool_input is not None
        if self.kind is StepKind.ACTION and not (has_name and has_input):
            raise ValueError("action steps need both tool_name and tool_input")
        if self.kind is not StepKind.ACTION and (has_name or has_input):
            raise ValueError(f"'{self.name}' steps cannot carry tool_name or tool_input")

    @property
    def is_terminal(self) -> bool:
        return self.kind in TERMINAL_KINDS

    @classmethod
    def action(cls, tool_name: str, tool_input: dict, content: str = "") -> "Step":
        return cls(
            kind=StepKind.ACTION,
            content=content,
            tool_name=tool_name,
            tool_input=tool_input,
        )

    @classmethod
    def error(cls, message: str) -> "Step":
        return cls(kind=StepKind.ERROR, content=message, success=False)

    @classmethod
    def output(cls, content: str) -> "Step":
        return cls(kind=StepKind.OUTPUT, content=content)

    @classmethod
    def observe(cls, content: str) -> "Step":
        return cls(kind=StepKind.OBSERVE, content=content, success=True)

    def to_wire(self) -> dict:
        """Serialize to the wire step schema."""
        data: dict[str, Any] = {
            "step": self.name,
            "content": self.content,
            "function": self.tool_name,
            "input": self.tool_input,
        }
        if self.success is not None:
            data["status"] = self.success
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_wire(), ensure_ascii=False, default=str)


class StepPayload(BaseModel):
    """JSON object the model must return for every turn."""

    model_config = ConfigDict(extra="ignore")

    step: str
    content: Optional[str] = None
    function: Optional[str] = None
    input: Optional[dict[str, Any]] = None
    status: Optional[bool] = None

    @field_validator("content", mode="before")
    @classmethod
    def normalize_content(cls, v):
        """Accept structured content by re-encoding it as JSON text."""
        if v is None or isinstance(v, str):
            return v
        return json.dumps(v, ensure_ascii=False, default=str)


class Role(str, Enum):
    """Roles of transcript messages."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """One transcript message."""

    role: Role
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}
