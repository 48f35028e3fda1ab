"""
Debounce state machine.

Coalesces bursts of input into a single evaluation once the input has been
quiet for a fixed interval. There is no background thread: the owner calls
poll() (e.g. from its event loop tick) and the debouncer reports whether the
quiet period has elapsed.
"""

from __future__ import annotations

import time
from enum import Enum, auto
from typing import Callable, Optional


class DebounceState(Enum):
    IDLE = auto()
    PENDING = auto()
    EVALUATING = auto()


class Debouncer:
    """
    Single-shot timer that re-arms on every trigger.
    
    States:
        IDLE -> PENDING on trigger()
        PENDING -> PENDING on trigger() (deadline pushed back)
        PENDING -> EVALUATING when the deadline passes (begin())
        EVALUATING -> IDLE on finish()
    """
    
    def __init__(
        self,
        delay_seconds: float = 0.15,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            delay_seconds: Quiet period required before evaluating
            clock: Monotonic time source (injected in tests)
        """
        self.delay_seconds = delay_seconds
        self.clock = clock
        self.state = DebounceState.IDLE
        self._deadline: Optional[float] = None
    
    @property
    def deadline(self) -> Optional[float]:
        return self._deadline
    
    def trigger(self) -> None:
        """Record new input and (re-)arm the timer."""
        self._deadline = self.clock() + self.delay_seconds
        if self.state is DebounceState.IDLE:
            self.state = DebounceState.PENDING
    
    def is_due(self) -> bool:
        return (
            self.state is DebounceState.PENDING
            and self._deadline is not None
            and self.clock() >= self._deadline
        )
    
    def begin(self, force: bool = False) -> bool:
        """
        Move to EVALUATING if the timer has fired (or force is set).
        
        Returns:
            True if the caller should evaluate now
        """
        if self.state is not DebounceState.PENDING:
            return False
        if not force and not self.is_due():
            return False
        self.state = DebounceState.EVALUATING
        self._deadline = None
        return True
    
    def finish(self) -> None:
        # Input that arrived mid-evaluation keeps its own timer.
        self.state = DebounceState.PENDING if self._deadline is not None else DebounceState.IDLE
    
    def cancel(self) -> None:
        self.state = DebounceState.IDLE
        self._deadline = None
