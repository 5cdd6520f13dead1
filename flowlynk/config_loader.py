"""
Agent profile loader for FlowLynk.

Loads an AgentProfile from a YAML file with support for environment
variable interpolation.

Example profile::

    user_system_prompt: Answer in French.
    steps:
      - name: research
        purpose: Collect the facts needed for the answer
    examples:
      - user_query: What is 2 + 2?
        output:
          - {step: initialization, content: Add the numbers}
          - {step: output, content: "4"}
    history:
      - {role: user, content: Hello}
      - {role: assistant, content: '{"step": "output", "content": "Hi!"}'}
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Union

import yaml

from .models import AgentProfile, CustomStep, Example, Message, Role

logger = logging.getLogger(__name__)

# Regex for environment variable interpolation: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def resolve_env_vars(value: str) -> str:
    """
    Resolve environment variable references in a string.

    Supports ${VAR} and ${VAR:-default} syntax.
    """

    def replace_match(match: re.Match) -> str:
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(match.group(1), default_value)

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any) -> Any:
    """Recursively substitute environment variables in a data structure."""
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    return data


def _parse_step(data: dict) -> CustomStep:
    return CustomStep(name=str(data["name"]), purpose=str(data.get("purpose", "")))


def _parse_example(data: dict) -> Example:
    query = data.get("user_query", data.get("UserQuery"))
    if query is None:
        raise KeyError("user_query")
    output = data.get("output", data.get("Output")) or []
    if not all(isinstance(item, dict) for item in output):
        raise ValueError("example output must be a list of step objects")
    return Example(user_query=str(query), output=list(output))


def _parse_message(data: dict) -> Message:
    role = Role(data["role"])
    if role is Role.SYSTEM:
        raise ValueError("history cannot contain system messages")
    return Message(role=role, content=str(data.get("content", "")))


def parse_profile(data: dict) -> AgentProfile:
    """
    Build an AgentProfile from a plain dict.

    Raises:
        ValueError: If the profile is invalid
    """
    data = _substitute_env_vars_recursive(data)
    sections = (
        ("steps", _parse_step),
        ("examples", _parse_example),
        ("history", _parse_message),
    )
    parsed: dict[str, list] = {}
    for key, parse_item in sections:
        items = data.get(key) or []
        if not isinstance(items, list):
            raise ValueError(f"Invalid profile: '{key}' must be a list")
        try:
            parsed[key] = [parse_item(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Failed to parse profile '%s': %s", key, e)
            raise ValueError(f"Invalid profile '{key}' entry: {e}") from e

    return AgentProfile(
        user_system_prompt=data.get("user_system_prompt") or None,
        steps=parsed["steps"],
        examples=parsed["examples"],
        history=parsed["history"],
    )


def load_profile(path: Union[str, Path]) -> AgentProfile:
    """
    Load an agent profile from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the profile is invalid
    """
    profile_path = Path(path)
    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    logger.debug("Loading agent profile from %s", profile_path)
    with open(profile_path, "r") as f:
        raw = yaml.safe_load(f)

    if raw is None:
        return AgentProfile()
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid profile {profile_path}: expected a mapping")
    return parse_profile(raw)
