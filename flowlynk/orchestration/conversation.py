"""
Conversation state: the ordered transcript sent to the model on every turn.
"""

from typing import Iterable, Optional, Union

from ..models.step import Message, Role


class ConversationState:
    """
    Append-only transcript seeded with a single system message.

    Only the owning OrchestrationLoop mutates it.
    """

    def __init__(self, system_prompt: str, history: Optional[Iterable[Message]] = None):
        self._messages: list[Message] = [Message(role=Role.SYSTEM, content=system_prompt)]
        for message in history or ():
            if message.role is Role.SYSTEM:
                raise ValueError("seed history cannot contain system messages")
            self._messages.append(message)

    def append_message(self, role: Union[Role, str], content: str) -> None:
        """Append a message. Raises ValueError for unknown roles."""
        self._messages.append(Message(role=Role(role), content=content))

    def reset(self, system_prompt: str) -> None:
        """Drop every message and reseed with a fresh system message."""
        self._messages = [Message(role=Role.SYSTEM, content=system_prompt)]

    def messages(self) -> list[Message]:
        """Full transcript, system message included."""
        return list(self._messages)

    def message_log(self) -> list[Message]:
        """Transcript without the system message."""
        return list(self._messages[1:])

    def as_payload(self) -> list[dict]:
        """Transcript in chat-completions message format."""
        return [message.to_dict() for message in self._messages]

    def __len__(self) -> int:
        return len(self._messages)
