"""
Core orchestration loop.

An ``OrchestrationLoop`` is one agent session.  It owns the conversation
transcript and the step history, and drives the step protocol:

    REQUEST -> PARSE -> (DISPATCH) -> CONTINUE | TERMINATE

Every model turn is a single JSON step.  ``action`` steps run a tool and
feed its result back as an ``observe`` message; ``output`` and ``demand``
steps end the run with their content; any error ends the run with a
diagnostic.  ``run()`` always returns an ``OrchestrationResult`` and never
raises for model, parse or tool failures.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Union

from ..errors import ConfigurationError, EmptyResponseError, TransportError
from ..llm_call import ChatClient
from ..models.step import Message, Role, Step, StepKind
from ..tools.dispatcher import ToolDispatcher
from ..tools.registry import ToolRegistry
from ..tracing import TracingContext
from .conversation import ConversationState
from .events import StepEvents, StepObserver
from .parser import parse_step

logger = logging.getLogger(__name__)

CONTINUE_PROMPT = "Proceed with the next step"
EMPTY_OUTPUT = "No response provided"
EMPTY_RESPONSE = "No response content received from API"
HTTP_STATUS_DOCS = "https://developer.mozilla.org/en-US/docs/Web/HTTP/Reference/Status/"


@dataclass
class OrchestrationResult:
    """Result from a complete orchestration run."""

    result: str
    steps: list[Step] = field(default_factory=list)


def _transport_error_message(error: TransportError) -> str:
    message = f"API error: {error}"
    if error.status_code:
        message += f", For more info visit {HTTP_STATUS_DOCS}{error.status_code}"
    return message


class OrchestrationLoop:
    """
    One agent session.

    Per-run flow:
        1. Verify the client is configured (missing key ends the run at once)
        2. Append the query as a user message
        3. Request a completion for the whole transcript
        4. Parse it into a Step and notify observers
        5. Branch on the step kind: dispatch a tool, continue, or terminate

    ``run()`` calls on the same loop must be serialized: await one before
    starting the next, or use separate loops.  There is no iteration cap
    unless ``max_steps`` is set.
    """

    def __init__(
        self,
        client: ChatClient,
        system_prompt: Union[str, Callable[[], str]],
        registry: Optional[ToolRegistry] = None,
        history: Optional[Iterable[Message]] = None,
        max_steps: Optional[int] = None,
        execution_id: Optional[str] = None,
        tracing_context: Optional[TracingContext] = None,
    ):
        self.client = client
        self.registry = registry if registry is not None else ToolRegistry()
        self.max_steps = max_steps
        self.execution_id = execution_id
        self.tracing_context = tracing_context
        self.events = StepEvents()

        self._system_prompt = system_prompt
        self._dispatcher = ToolDispatcher(self.registry)
        self._conversation = ConversationState(self._build_system_prompt(), history)
        self._steps: list[Step] = []

    def _build_system_prompt(self) -> str:
        if callable(self._system_prompt):
            return self._system_prompt()
        return self._system_prompt

    @property
    def _id_prefix(self) -> str:
        return f"[{self.execution_id}] " if self.execution_id else ""

    async def run(
        self, query: str, on_step: Optional[StepObserver] = None
    ) -> OrchestrationResult:
        """
        Run the loop for a query.

        Args:
            query: The user's question or task.
            on_step: Called once per recorded step, before the loop acts on
                it. May be a coroutine function.

        Returns:
            OrchestrationResult with the final result and the step trace.
        """
        try:
            self.client.check_configured()
        except ConfigurationError as e:
            logger.error("%sCannot run: %s", self._id_prefix, e)
            step = Step.error(str(e))
            self._steps = [step]
            await self.events.emit(step, on_step)
            return OrchestrationResult(result=step.content, steps=[step])

        self._steps = []
        self._conversation.append_message(Role.USER, query)
        logger.debug("%sStarting run for: %s", self._id_prefix, query)

        if self.tracing_context:
            return await self._run_with_tracing(query, on_step)
        return await self._run_loop(on_step)

    async def _run_with_tracing(
        self, query: str, on_step: Optional[StepObserver]
    ) -> OrchestrationResult:
        """Run the loop inside an orchestration span."""
        with self.tracing_context.span(
            name="orchestration",
            metadata={"max_steps": self.max_steps, "execution_id": self.execution_id},
            input={"query": query},
        ) as span:
            outcome = await self._run_loop(on_step)
            span.set_output(
                {"steps_taken": len(self._steps), "result": outcome.result[:500]}
            )
            if self._steps and self._steps[-1].kind is StepKind.ERROR:
                span.set_status("error")
            return outcome

    async def _run_loop(self, on_step: Optional[StepObserver]) -> OrchestrationResult:
        """Core loop: request, parse, branch until a terminal step."""
        turn = 0
        while True:
            if self.max_steps is not None and turn >= self.max_steps:
                logger.warning("%sMax steps (%d) reached", self._id_prefix, self.max_steps)
                step = Step.error(f"Maximum steps ({self.max_steps}) reached without output")
                await self._record(step, on_step)
                return self._fail(step)
            turn += 1

            step = await self._request_step(turn)
            await self._record(step, on_step)

            if step.kind is StepKind.ERROR:
                return self._fail(step)

            self._conversation.append_message(Role.ASSISTANT, step.to_json())

            if step.kind is StepKind.ACTION:
                outcome = await self._dispatch(step, turn)
                await self._record(outcome, on_step)
                if outcome.kind is StepKind.ERROR:
                    return self._fail(outcome)
                self._conversation.append_message(Role.USER, outcome.to_json())
                continue

            if step.kind is StepKind.DEMAND:
                return self._finish(step.content)

            if step.kind is StepKind.OUTPUT:
                return self._finish(step.content or EMPTY_OUTPUT)

            self._conversation.append_message(Role.USER, CONTINUE_PROMPT)

    async def _request_step(self, turn: int) -> Step:
        """Ask the model for the next step and parse it."""
        try:
            content = await self._call_llm(turn)
            if not content:
                raise EmptyResponseError(EMPTY_RESPONSE)
        except TransportError as e:
            logger.error("%sModel call failed at turn %d: %s", self._id_prefix, turn, e)
            return Step.error(_transport_error_message(e))
        except EmptyResponseError as e:
            logger.error("%sEmpty model response at turn %d", self._id_prefix, turn)
            return Step.error(str(e))
        except Exception as e:
            logger.error("%sModel call failed at turn %d: %s", self._id_prefix, turn, e)
            return Step.error(f"API error: {str(e) or type(e).__name__}")

        return parse_step(content)

    async def _call_llm(self, turn: int) -> Optional[str]:
        messages = self._conversation.as_payload()
        logger.debug("%sTurn %d: calling model", self._id_prefix, turn)
        if not self.tracing_context:
            return await self.client.complete(messages)

        params = getattr(self.client, "params", None)
        with self.tracing_context.generation(
            name=f"turn_{turn}",
            model=params.model if params is not None else "",
            input=messages,
            model_parameters={
                "temperature": params.temperature,
                "max_tokens": params.max_tokens,
            }
            if params is not None
            else None,
        ) as gen:
            try:
                content = await self.client.complete(messages)
            except Exception:
                gen.set_status("error")
                raise
            gen.set_output((content or "")[:2000])
            usage = getattr(self.client, "last_usage", None)
            if usage is not None:
                gen.set_usage(
                    prompt_tokens=getattr(usage, "prompt_tokens", None),
                    completion_tokens=getattr(usage, "completion_tokens", None),
                    total_tokens=getattr(usage, "total_tokens", None),
                )
            return content

    async def _dispatch(self, step: Step, turn: int) -> Step:
        """Run the tool requested by an action step."""
        logger.debug(
            "%sTurn %d: executing tool '%s'", self._id_prefix, turn, step.tool_name
        )
        if not self.tracing_context:
            return await self._dispatcher.dispatch(step.tool_name, step.tool_input)

        with self.tracing_context.span(
            name=f"tool:{step.tool_name}", input=step.tool_input
        ) as span:
            outcome = await self._dispatcher.dispatch(step.tool_name, step.tool_input)
            span.set_output({"result": outcome.content[:500]})
            if outcome.kind is StepKind.ERROR:
                span.set_status("error")
            return outcome

    async def _record(self, step: Step, on_step: Optional[StepObserver]) -> None:
        """Append a step to the history and notify observers."""
        self._steps.append(step)
        await self.events.emit(step, on_step)

    def _fail(self, step: Step) -> OrchestrationResult:
        # Keep the failing step in the transcript for traceability
        self._conversation.append_message(Role.ASSISTANT, step.to_json())
        return self._finish(step.content)

    def _finish(self, result: str) -> OrchestrationResult:
        self._log_trace_summary()
        return OrchestrationResult(result=result, steps=list(self._steps))

    def _log_trace_summary(self) -> None:
        """Log a compact trace summary."""
        logger.info("%s%s", self._id_prefix, "─" * 50)
        logger.info("%sTRACE SUMMARY", self._id_prefix)
        logger.info("%s%s", self._id_prefix, "─" * 50)
        for number, step in enumerate(self._steps, start=1):
            preview = step.content
            if len(preview) > 80:
                preview = preview[:80] + "..."
            if step.kind is StepKind.ACTION:
                logger.info(
                    "%sStep %d: action -> %s", self._id_prefix, number, step.tool_name
                )
            elif step.kind is StepKind.ERROR:
                logger.error("%sStep %d [ERROR]: %s", self._id_prefix, number, preview)
            else:
                logger.info("%sStep %d: %s -> %s", self._id_prefix, number, step.name, preview)

    def reset(self) -> None:
        """Discard the transcript and step history, reseeding the system message."""
        self._conversation.reset(self._build_system_prompt())
        self._steps = []

    def get_steps(self) -> list[Step]:
        """Steps recorded by the last run."""
        return list(self._steps)

    def message_logs(self) -> list[Message]:
        """Transcript without the system message."""
        return self._conversation.message_log()

    def messages(self) -> list[Message]:
        """Full transcript, system message included."""
        return self._conversation.messages()

    def get_trace(self) -> list[dict]:
        """Steps of the last run in wire format."""
        return [step.to_wire() for step in self._steps]

    async def close(self) -> None:
        """Close the underlying chat client."""
        try:
            await self.client.close()
        except Exception as e:
            logger.debug("Error closing chat client: %s", e)
