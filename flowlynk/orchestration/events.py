"""
Step event channel.

Observers are plain callables taking a Step; they may be sync or return an
awaitable.  They are notified in subscription order and each one completes
before the next is called, so the loop never acts on a step before every
observer has seen it.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from ..models.step import Step

logger = logging.getLogger(__name__)

StepObserver = Callable[[Step], Union[None, Awaitable[Any]]]


class StepEvents:
    """Ordered set of step observers."""

    def __init__(self):
        self._observers: list[StepObserver] = []

    def subscribe(self, observer: StepObserver) -> None:
        """Add an observer."""
        self._observers.append(observer)

    def unsubscribe(self, observer: StepObserver) -> None:
        """Remove an observer. Unknown observers are ignored."""
        if observer in self._observers:
            self._observers.remove(observer)

    async def emit(self, step: Step, extra: Optional[StepObserver] = None) -> None:
        """
        Notify every observer of ``step``.

        Args:
            step: The step just recorded.
            extra: A per-run observer, called after the subscribed ones.
        """
        observers = list(self._observers)
        if extra is not None:
            observers.append(extra)

        for observer in observers:
            try:
                result = observer(step)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Step observer failed on '%s' step", step.name)

    def __len__(self) -> int:
        return len(self._observers)
