"""
FlowLynk agent factory.

Wires the default collaborators (OpenAI-compatible client, system prompt
builder, agent profile) to an OrchestrationLoop.
"""

import asyncio
import logging
from typing import Optional

from .config import config
from .llm_call import ChatClient, ModelParameters, OpenAIChatClient
from .models import AgentProfile
from .orchestration import OrchestrationLoop, OrchestrationResult, StepObserver
from .prompts import build_system_prompt
from .tools import ToolRegistry
from .tracing import TracingContext

logger = logging.getLogger(__name__)


def create_agent(
    tools: Optional[ToolRegistry] = None,
    profile: Optional[AgentProfile] = None,
    client: Optional[ChatClient] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    max_steps: Optional[int] = None,
    execution_id: Optional[str] = None,
    tracing_context: Optional[TracingContext] = None,
) -> OrchestrationLoop:
    """
    Build an agent session.

    Args:
        tools: Tools the model may call.
        profile: Extra instructions, predefined steps, examples and seed history.
        client: Chat client. Defaults to an OpenAIChatClient built from the
            remaining arguments and the environment configuration.
        api_key: API key for the default client.
        base_url: Endpoint for the default client.
        model: Model name for the default client.
        temperature: Sampling temperature for the default client.
        max_tokens: Output token limit for the default client.
        max_steps: Optional cap on model requests per run.
        execution_id: Optional ID for correlating logs.
        tracing_context: Optional tracing context for Langfuse observability.
    """
    registry = tools if tools is not None else ToolRegistry()
    profile = profile or AgentProfile()

    if client is None:
        params = ModelParameters(
            model=model or config.model.model,
            temperature=temperature if temperature is not None else config.model.temperature,
            max_tokens=max_tokens if max_tokens is not None else config.model.max_tokens,
        )
        client = OpenAIChatClient(api_key=api_key, base_url=base_url, params=params)

    logger.debug(
        "Creating agent with %d tool(s) and %d predefined step(s)",
        len(registry),
        len(profile.steps),
    )
    return OrchestrationLoop(
        client=client,
        system_prompt=lambda: build_system_prompt(registry, profile),
        registry=registry,
        history=profile.history,
        max_steps=max_steps if max_steps is not None else config.model.max_steps,
        execution_id=execution_id,
        tracing_context=tracing_context,
    )


async def _run_once(
    agent: OrchestrationLoop, query: str, on_step: Optional[StepObserver]
) -> OrchestrationResult:
    try:
        return await agent.run(query, on_step=on_step)
    finally:
        await agent.close()


def run_query(
    query: str,
    tools: Optional[ToolRegistry] = None,
    profile: Optional[AgentProfile] = None,
    on_step: Optional[StepObserver] = None,
    **agent_kwargs,
) -> OrchestrationResult:
    """
    Convenience function to run a single query from synchronous code.

    Args:
        query: The question or task.
        tools: Tools the model may call.
        profile: Agent profile.
        on_step: Optional step observer.
        **agent_kwargs: Passed to create_agent().

    Returns:
        The run result.
    """
    agent = create_agent(tools=tools, profile=profile, **agent_kwargs)
    return asyncio.run(_run_once(agent, query, on_step))
