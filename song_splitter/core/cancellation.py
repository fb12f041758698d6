"""
Cooperative cancellation shared by every unit of a pipeline run.
"""

import asyncio
import logging
import signal
from typing import Callable

log = logging.getLogger(__name__)


class CancellationToken:
    """
    A one-shot cancellation signal.

    Once ``cancel`` has been called the token stays cancelled; waiters are
    woken and later checks see the cancelled state immediately.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None
        self._callbacks: list[Callable[[str], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> bool:
        """Triggers cancellation. Returns False if it was already triggered."""
        if self._event.is_set():
            return False
        self.reason = reason
        self._event.set()
        for callback in self._callbacks:
            callback(reason)
        return True

    def add_callback(self, callback: Callable[[str], None]) -> None:
        self._callbacks.append(callback)

    async def wait(self) -> None:
        await self._event.wait()


def install_signal_handlers(
    token: CancellationToken,
    loop: asyncio.AbstractEventLoop | None = None,
) -> Callable[[], None]:
    """
    Routes SIGINT and SIGTERM to ``token``.

    Returns a function that restores the previous handlers.
    """
    loop = loop or asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    previous: dict[signal.Signals, object] = {}

    def _on_signal(sig: signal.Signals) -> None:
        if token.cancel(f"received {sig.name}"):
            log.info("Received interrupt signal, cleaning up...")

    def _fallback(signum: int, _frame) -> None:
        loop.call_soon_threadsafe(_on_signal, signal.Signals(signum))

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, sig)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # add_signal_handler is unavailable on Windows event loops
            previous[sig] = signal.signal(sig, _fallback)

    def restore() -> None:
        for sig in installed:
            loop.remove_signal_handler(sig)
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    return restore
