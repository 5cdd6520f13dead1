"""
Step parser: raw model text to a validated Step.

The model is asked for a single JSON object per turn, but in practice it may
wrap the object in a markdown code fence.  ``validate_step`` raises on bad
input; ``parse_step`` turns those failures into error steps so the loop
never has to handle an exception here.
"""

import json
import logging
import re

from pydantic import ValidationError

from ..errors import ParseError, ProtocolViolation
from ..models.step import Step, StepKind, StepPayload, kind_for_label

logger = logging.getLogger(__name__)

MISSING_ACTION_FIELDS = "Invalid action step: Missing function or input fields"

_OPENING_FENCE = re.compile(r"^```[\w-]*\s*")
_CLOSING_FENCE = re.compile(r"\s*```$")


def strip_code_fences(raw: str) -> str:
    """Remove a surrounding ```json ... ``` fence, if any."""
    text = raw.strip()
    text = _OPENING_FENCE.sub("", text)
    text = _CLOSING_FENCE.sub("", text)
    return text.strip()


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def validate_step(raw: str) -> Step:
    """
    Parse and validate raw model output.

    Args:
        raw: Text returned by the model.

    Returns:
        The validated Step.

    Raises:
        ParseError: The text is not a JSON object.
        ProtocolViolation: The object does not follow the step protocol.
    """
    cleaned = strip_code_fences(raw)
    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, RecursionError) as e:
        raise ParseError(f"JSON parsing error: {e}") from e

    if not isinstance(data, dict):
        raise ParseError(
            f"JSON parsing error: expected an object, got {type(data).__name__}"
        )
    if "step" not in data:
        raise ProtocolViolation("Invalid step: missing 'step' field")

    try:
        payload = StepPayload.model_validate(data)
    except ValidationError as e:
        raise ProtocolViolation(f"Invalid step: {_describe_validation_error(e)}") from e

    label = payload.step.strip()
    if not label:
        raise ProtocolViolation("Invalid step: empty 'step' field")

    kind = kind_for_label(label)
    content = payload.content or ""
    has_function = bool(payload.function)
    has_input = payload.input is not None

    if kind is StepKind.ACTION:
        if not (has_function and has_input):
            raise ProtocolViolation(MISSING_ACTION_FIELDS)
        return Step(
            kind=kind,
            name=label,
            content=content,
            tool_name=payload.function,
            tool_input=payload.input,
        )

    if has_function and has_input:
        raise ProtocolViolation(
            f"Invalid step: '{label}' carries function and input but is not an action step"
        )
    if has_function or has_input:
        logger.debug("Dropping stray tool field from '%s' step", label)

    if kind is StepKind.ERROR:
        return Step(kind=kind, name=label, content=content, success=False)
    return Step(kind=kind, name=label, content=content)


def parse_step(raw: str) -> Step:
    """Parse raw model output, converting any failure into an error step."""
    try:
        return validate_step(raw)
    except (ParseError, ProtocolViolation) as e:
        logger.warning("Rejected model output: %s", e)
        return Step.error(str(e))
