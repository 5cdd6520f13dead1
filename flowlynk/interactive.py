#!/usr/bin/env python3
"""
FlowLynk Interactive CLI

A command-line interface for running step-protocol agents against an
OpenAI-compatible endpoint.
"""

import argparse
import asyncio
import importlib
import json
import logging
import sys
import uuid
from typing import Optional

from .config import config
from .config_loader import load_profile
from .models import AgentProfile, Step, StepKind
from .orchestration import OrchestrationLoop
from .orchestrator import create_agent
from .tools import ToolRegistry, default_registry
from .tracing import TracingContext, init_tracing_client, shutdown_tracing

logger = logging.getLogger(__name__)

HELP = """
Available commands:
  /help     - Show this help message
  /trace    - Show the steps of the last query
  /tools    - List available tools
  /verbose  - Toggle step echo
  /reset    - Clear the conversation
  /quit     - Exit the CLI

Type your questions or tasks below.
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def load_tools(ref: Optional[str]) -> ToolRegistry:
    """
    Load a tool registry from ``module:attribute``.

    The attribute may be a ToolRegistry or a zero-argument callable
    returning one. Without a reference the builtin tools are used.
    """
    if not ref:
        return default_registry()

    module_name, _, attr = ref.partition(":")
    if not module_name or not attr:
        raise ValueError(f"Expected module:attribute, got '{ref}'")
    target = getattr(importlib.import_module(module_name), attr)
    registry = target() if callable(target) and not isinstance(target, ToolRegistry) else target
    if not isinstance(registry, ToolRegistry):
        raise TypeError(f"{ref} did not produce a ToolRegistry")
    return registry


def format_step(step: Step) -> str:
    """One-line rendering of a step."""
    if step.kind is StepKind.ACTION:
        return f"[action] {step.tool_name}({json.dumps(step.tool_input, ensure_ascii=False)})"
    content = step.content
    if len(content) > 200:
        content = content[:200] + "..."
    return f"[{step.name}] {content}"


def print_trace(agent: OrchestrationLoop) -> None:
    """Print the steps of the last run."""
    steps = agent.get_steps()
    if not steps:
        print("\nNo trace available. Run a query first.\n")
        return

    print("\n" + "═" * 70)
    print("STEP TRACE")
    print("═" * 70)
    for number, step in enumerate(steps, start=1):
        print(f"{number:>3}. {format_step(step)}")
    print()


def print_tools(registry: ToolRegistry) -> None:
    """Print available tools."""
    print("\nAvailable Tools:")
    print("─" * 64)
    print(registry.get_tools_summary() or "None")
    print()


class InteractiveCLI:
    """Interactive REPL around one agent session."""

    def __init__(self, agent: OrchestrationLoop, verbose: bool = False):
        self.agent = agent
        self.verbose = verbose

    def echo_step(self, step: Step) -> None:
        if self.verbose:
            print(format_step(step))

    def toggle_verbose(self) -> None:
        self.verbose = not self.verbose
        print(f"\nStep echo: {'ON' if self.verbose else 'OFF'}\n")

    async def process_query(self, query: str) -> None:
        outcome = await run_traced(self.agent, query, self.echo_step)
        print("\n" + "═" * 70)
        print(outcome)
        print("═" * 70)
        count = len(self.agent.get_steps())
        print(f"(Completed in {count} step{'s' if count != 1 else ''}; /trace for details)\n")

    async def run(self) -> None:
        """Run the interactive loop until /quit or EOF."""
        print("FlowLynk interactive" + HELP)
        while True:
            try:
                user_input = (await asyncio.to_thread(input, ">>> ")).strip()
            except EOFError:
                print("\nGoodbye!\n")
                return

            if not user_input:
                continue
            if not user_input.startswith("/"):
                await self.process_query(user_input)
                continue

            command = user_input.lower()
            if command in ("/quit", "/exit", "/q"):
                print("\nGoodbye!\n")
                return
            elif command in ("/help", "/h", "/?"):
                print(HELP)
            elif command == "/trace":
                print_trace(self.agent)
            elif command == "/tools":
                print_tools(self.agent.registry)
            elif command == "/verbose":
                self.toggle_verbose()
            elif command == "/reset":
                self.agent.reset()
                print("\nConversation cleared.\n")
            else:
                print(f"\nUnknown command: {user_input}")
                print("Type /help for available commands.\n")


async def run_traced(agent: OrchestrationLoop, query: str, on_step=None) -> str:
    """Run one query, wrapped in a Langfuse trace when tracing is enabled."""
    tracing = TracingContext(execution_id=f"run-{uuid.uuid4().hex[:12]}")
    if not tracing.enabled:
        agent.tracing_context = None
        return (await agent.run(query, on_step=on_step)).result

    agent.tracing_context = tracing
    agent.execution_id = tracing.execution_id
    tracing.start_trace(name="flowlynk_run", query=query)
    output, status = None, "error"
    try:
        outcome = await agent.run(query, on_step=on_step)
        output = outcome.result
        failed = bool(outcome.steps) and outcome.steps[-1].kind is StepKind.ERROR
        status = "error" if failed else "success"
        return outcome.result
    finally:
        tracing.end_trace(output=output, status=status)


async def _main_async(args: argparse.Namespace) -> int:
    profile = load_profile(args.profile) if args.profile else AgentProfile()
    agent = create_agent(
        tools=load_tools(args.tools),
        profile=profile,
        base_url=args.base_url,
        model=args.model,
    )
    try:
        if args.query:
            result = await run_traced(agent, args.query)
            if args.json:
                print(json.dumps(
                    {"query": args.query, "result": result, "trace": agent.get_trace()},
                    indent=2,
                    ensure_ascii=False,
                ))
            else:
                print(result)
            steps = agent.get_steps()
            return 1 if steps and steps[-1].kind is StepKind.ERROR else 0

        await InteractiveCLI(agent, verbose=args.verbose).run()
        return 0
    finally:
        await agent.close()


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="FlowLynk Interactive CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Start interactive mode
  %(prog)s -q "What is 2^10?"       # Run a single query
  %(prog)s --profile agent.yaml     # Use an agent profile
  %(prog)s --tools mypkg.tools:registry
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("-q", "--query", type=str, help="Run a single query and exit")
    parser.add_argument("--json", action="store_true", help="Output results as JSON (for scripting)")
    parser.add_argument("--profile", type=str, default=None, help="YAML agent profile")
    parser.add_argument(
        "--tools",
        type=str,
        default=None,
        help="Tool registry as module:attribute (default: builtin tools)",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Model endpoint URL (default: from FLOWLYNK_BASE_URL env)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help=f"Model name (default: from FLOWLYNK_MODEL env or {config.model.model})",
    )
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    if config.langfuse.enabled:
        init_tracing_client(
            public_key=config.langfuse.public_key,
            secret_key=config.langfuse.secret_key,
            host=config.langfuse.host,
            debug=config.langfuse.debug,
        )

    try:
        return asyncio.run(_main_async(args))
    except KeyboardInterrupt:
        print("\nInterrupted.\n")
        return 130
    finally:
        shutdown_tracing()


if __name__ == "__main__":
    sys.exit(main())
