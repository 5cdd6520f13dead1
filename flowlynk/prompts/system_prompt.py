"""
System prompt for the step protocol.

The prompt tells the model to answer with exactly one JSON step per turn,
lists the available tools, and renders any predefined steps, worked
examples and extra user instructions from the agent profile.
"""

import json
from typing import Optional

from ..models.profile import AgentProfile
from ..tools.registry import ToolRegistry

PROTOCOL = """You are an AI agent that works through a strict step protocol.
Reply to every turn with exactly ONE JSON object describing a single step.

## STEP SEQUENCE
1. INITIALIZATION (exactly once, always first)
   Analyze the query, break the problem down and plan your approach.
   {"step": "initialization", "content": "analysis and plan", "function": null, "input": null}

2. INTERMEDIATE STEPS (as needed, after initialization, before output)
   - To use a tool, emit an "action" step with BOTH "function" and "input".
     "function" must be an exact name from the tool list; "input" must be an
     object with every required parameter.
     {"step": "action", "content": "reasoning", "function": "exact_tool_name", "input": {...}}
     The tool result comes back as {"step": "observe", "content": ...}.
   - If a required tool is not available, emit a "demand" step and stop.
     {"step": "demand", "content": "I need the [tool_name] tool to proceed", "function": null, "input": null}
{custom_steps}

3. OUTPUT (exactly once, always last)
   Deliver the complete final answer.
   {"step": "output", "content": "complete final answer", "function": null, "input": null}

## RULES
- One step per reply; wait for the next turn before continuing.
- "function" and "input" are only allowed on "action" steps. Any step that
  carries both of them MUST be an "action" step.
- Never emit anything outside the JSON object."""

RESPONSE_FORMAT = """## RESPONSE FORMAT
{
  "step": "initialization" | "[custom_step]" | "action" | "demand" | "output" | "error",
  "content": "explanation of the current step",
  "function": "exact_tool_name" | null,
  "input": {"parameter": "value"} | null,
  "status": false
}
"status" is required as false on "error" steps and omitted otherwise."""


def _render_custom_steps(profile: AgentProfile) -> str:
    if not profile.steps:
        return "   - You may create custom-named steps for intermediate reasoning."
    lines = ["   - You can use these predefined steps:"]
    lines.extend(f'     - "{step.name}": {step.purpose}' for step in profile.steps)
    lines.append("   - Custom steps follow the same JSON format.")
    return "\n".join(lines)


def _render_examples(profile: AgentProfile) -> str:
    blocks = []
    for example in profile.examples:
        lines = [f"User Query: {example.user_query}"]
        lines.extend(
            f"Output: {json.dumps(output, ensure_ascii=False)}" for output in example.output
        )
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_system_prompt(
    registry: Optional[ToolRegistry] = None,
    profile: Optional[AgentProfile] = None,
) -> str:
    """
    Render the system prompt for an agent.

    Args:
        registry: Tools offered to the model.
        profile: Extra instructions, predefined steps and examples.

    Returns:
        The complete system prompt.
    """
    profile = profile or AgentProfile()
    tools_summary = registry.get_tools_summary() if registry is not None else ""

    sections = [PROTOCOL.replace("{custom_steps}", _render_custom_steps(profile))]
    if profile.user_system_prompt:
        sections.append(
            "## ADDITIONAL USER INSTRUCTIONS (may override the rules above)\n"
            + profile.user_system_prompt
        )
    sections.append("## AVAILABLE TOOLS\n" + (tools_summary or "None"))
    sections.append(RESPONSE_FORMAT)

    examples = _render_examples(profile)
    if examples:
        sections.append("## REFERENCE EXAMPLES\n" + examples)

    return "\n\n".join(sections)
