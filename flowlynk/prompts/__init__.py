"""
Prompt construction for FlowLynk agents.
"""

from .system_prompt import build_system_prompt

__all__ = ["build_system_prompt"]
