"""An idle timer that fires a callback once no requests arrive for a while."""

from __future__ import annotations

import threading
import time
from typing import Callable


class IdleTimer:
    """Calls on_idle once more than `timeout` seconds pass without reset().

    The elapsed time is checked every `tick` seconds on a background thread.
    """

    def __init__(self, timeout: float, on_idle: Callable[[], None], tick: float = 1.0):
        self.timeout = timeout
        self.tick = tick
        self._on_idle = on_idle
        self._lock = threading.Lock()
        self._last_request = time.monotonic()
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start watching in the background and return immediately."""
        if self._thread is not None:
            raise RuntimeError("idle timer already started")
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self.tick):
            with self._lock:
                elapsed = time.monotonic() - self._last_request
            if elapsed > self.timeout:
                self._on_idle()
                return

    def reset(self) -> None:
        """Restart the idle countdown; call at the start of every request."""
        now = time.monotonic()
        with self._lock:
            self._last_request = now

    def stop(self) -> None:
        """Stop watching without firing."""
        self._stopped.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()