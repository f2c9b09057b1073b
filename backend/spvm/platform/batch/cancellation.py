"""Cooperative cancellation for batch runs."""

import asyncio


class CancellationToken:
    """A one-way stop flag with a cancellable sleep.

    Setting the flag never interrupts an in-flight remote call; the batch
    observes it at its checkpoints and ``sleep`` returns early when it is set.
    """

    def __init__(self):
        """Initialize an unset token."""
        self._event = asyncio.Event()

    @property
    def is_cancelled(self) -> bool:
        """Whether a stop was requested."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Request a stop."""
        self._event.set()

    async def sleep(self, seconds: float) -> bool:
        """Sleep for ``seconds`` unless cancelled first.

        Returns:
            True if the full interval elapsed, False if the token was cancelled
        """
        if self.is_cancelled:
            return False
        if seconds <= 0:
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return True
        return False
