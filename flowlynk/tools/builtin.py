"""
Builtin tools.

Small capabilities that make the CLI useful out of the box:
- calculate: mathematical expression evaluation via SymPy
- current_time: current date and time in a given timezone
"""

import logging
import re
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sympy import N
from sympy.parsing.sympy_parser import (
    parse_expr,
    standard_transformations,
    implicit_multiplication_application,
    convert_xor,
    factorial_notation,
)

from .registry import ToolRegistry

logger = logging.getLogger(__name__)

# Transformations for scientific calculator syntax
TRANSFORMATIONS = (
    standard_transformations
    + (implicit_multiplication_application,)
    + (convert_xor,)  # 2^16 -> 2**16
    + (factorial_notation,)  # 5! -> factorial(5)
)


def preprocess_expression(expression: str) -> str:
    """
    Rewrite calculator syntax SymPy does not parse.

    Handles:
        - Degree notation: sin(30 degrees) -> sin(30 * pi / 180)
        - ceil function: ceil(x) -> ceiling(x)
    """
    expression = re.sub(
        r"(\d+(?:\.\d+)?)\s*(?:degrees?|deg)\b",
        r"(\1 * pi / 180)",
        expression,
        flags=re.IGNORECASE,
    )
    return re.sub(r"\bceil\b", "ceiling", expression)


def calculate(expression: str):
    """
    Evaluate a mathematical expression numerically.

    Returns:
        An int for whole results, a float or complex otherwise.

    Raises:
        ValueError: The expression is empty or cannot be evaluated.
    """
    if not expression or not expression.strip():
        raise ValueError("Expression is empty")

    try:
        expr = parse_expr(
            preprocess_expression(expression),
            transformations=TRANSFORMATIONS,
            evaluate=True,
        )
        result = complex(N(expr))
    except (SyntaxError, TypeError, ValueError) as e:
        logger.debug("Cannot evaluate '%s': %s", expression, e)
        raise ValueError(f"Cannot evaluate '{expression}': {e}") from e

    if result.imag != 0:
        return result
    value = result.real
    return int(value) if value.is_integer() else value


def _handle_calculate(params: dict) -> dict:
    expression = params.get("expression", "")
    result = calculate(expression)
    if isinstance(result, complex):
        result = str(result)
    return {"expression": expression, "result": result}


def current_time(tz_name: str = "UTC") -> str:
    """
    Current time as an ISO 8601 string.

    Raises:
        ValueError: Unknown timezone name.
    """
    if not tz_name or tz_name.upper() == "UTC":
        tz = timezone.utc
    else:
        try:
            tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {tz_name}") from e
    return datetime.now(tz).isoformat(timespec="seconds")


def _handle_current_time(params: dict) -> dict:
    tz_name = params.get("timezone") or "UTC"
    return {"timezone": tz_name, "now": current_time(tz_name)}


def default_registry() -> ToolRegistry:
    """A fresh registry holding the builtin tools."""
    registry = ToolRegistry()
    registry.register_function(
        name="calculate",
        description="Perform mathematical calculations",
        parameters={"expression": "string (math expression like 2+2 or sqrt(16))"},
        handler=_handle_calculate,
    )
    registry.register_function(
        name="current_time",
        description="Get the current date and time",
        parameters={"timezone": "string (IANA name such as Europe/Paris, or UTC)"},
        handler=_handle_current_time,
    )
    return registry
