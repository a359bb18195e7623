"""Cooperative cancellation shared by one scheduler run."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

__all__ = ["CancellationToken", "OperationCancelledError"]

T = TypeVar("T")


class OperationCancelledError(Exception):
    """Raised when a guarded operation lost the race against cancellation."""

    def __init__(self, message: str = "The operation was canceled.") -> None:
        super().__init__(message)


class CancellationToken:
    """One-shot cancellation signal.

    A token is created each time the scheduler goes from stopped to
    running and is cancelled when it stops again. Cancelling twice, or
    cancelling a closed token, is a no-op.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._closed = False

    @property
    def is_cancelled(self) -> bool:
        """Return True once cancel() (or close()) has been called."""
        return self._event.is_set()

    @property
    def is_closed(self) -> bool:
        """Return True once the token has been released."""
        return self._closed

    def cancel(self) -> None:
        """Request cancellation; wakes every pending sleep() and guard()."""
        if self._closed:
            return
        self._event.set()

    def close(self) -> None:
        """Release the token. A closed token reads as cancelled."""
        self._event.set()
        self._closed = True

    async def sleep(self, delay_sec: float) -> bool:
        """Sleep for ``delay_sec`` unless cancelled first.

        Returns:
            True if the sleep was cut short by cancellation.
        """
        if self.is_cancelled:
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay_sec)
        except TimeoutError:
            return False
        return True

    async def guard(self, aw: Awaitable[T]) -> T:
        """Await ``aw`` unless cancellation happens first.

        The wrapped operation is cancelled when the token wins the race.

        Raises:
            OperationCancelledError: If the token was or became cancelled.
        """
        if self.is_cancelled:
            if asyncio.iscoroutine(aw):
                aw.close()
            raise OperationCancelledError()

        work = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            waiter.cancel()

        if work in done:
            return work.result()

        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        raise OperationCancelledError()
