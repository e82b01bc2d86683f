"""Host wiring of termination signals to `Application.stop()`.

`SignalShutdown` is passed to `Application` as its `shutdown_trigger`. Once
installed, every SIGINT/SIGTERM runs `stop()` once; `wait()` resolves to the
process exit status (0 when stop succeeded, 1 when it raised).
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Awaitable, Callable, Iterable


logger = logging.getLogger(__name__)

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class SignalShutdown:
    def __init__(self, signals: Iterable[signal.Signals] = DEFAULT_SIGNALS) -> None:
        self._signals = tuple(signals)
        self._stop: Callable[[], Awaitable[None]] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._done: asyncio.Future[int] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._installed: list[signal.Signals] = []

    def __call__(self, stop: Callable[[], Awaitable[None]]) -> None:
        loop = asyncio.get_running_loop()
        self._stop = stop
        self._loop = loop
        if self._done is None or self._done.done():
            self._done = loop.create_future()

        for sig in self._signals:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except (NotImplementedError, RuntimeError):
                # Windows event loops have no add_signal_handler.
                signal.signal(sig, lambda s, _frame: loop.call_soon_threadsafe(self._on_signal, s))
            if sig not in self._installed:
                self._installed.append(sig)

    @property
    def installed(self) -> bool:
        return bool(self._installed)

    def trigger(self, sig: signal.Signals = signal.SIGTERM) -> None:
        """Run the shutdown path as if `sig` had been received."""

        self._on_signal(sig)

    def _on_signal(self, sig: int) -> None:
        if self._loop is None or self._stop is None:
            return
        logger.info("Received %s, shutting down", signal.Signals(sig).name)
        task = self._loop.create_task(self._shutdown())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _shutdown(self) -> None:
        assert self._stop is not None
        try:
            await self._stop()
            code = 0
        except Exception:
            logger.exception("Shutdown failed")
            code = 1
        if self._done is not None and not self._done.done():
            self._done.set_result(code)

    async def wait(self) -> int:
        """Block until a signal-driven shutdown finished; return its exit status."""

        if self._done is None:
            raise RuntimeError("SignalShutdown.wait() called before it was installed")
        return await self._done

    def uninstall(self) -> None:
        if self._loop is not None:
            for sig in self._installed:
                try:
                    self._loop.remove_signal_handler(sig)
                except (NotImplementedError, RuntimeError):
                    signal.signal(sig, signal.SIG_DFL)
        self._installed.clear()
