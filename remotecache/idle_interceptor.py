"""Request handler wrapping that resets an idle timer on every request."""

from __future__ import annotations

import functools
from typing import Any, Callable


class IdleResettingHandler:
    """Resets idle_timer at the start of each request it passes to a handler."""

    def __init__(self, idle_timer: Any):
        self.idle_timer = idle_timer

    def wrap(self, handler: Callable[..., Any]) -> Callable[..., Any]:
        """Return handler wrapped so that each call first resets the idle timer."""

        @functools.wraps(handler)
        def wrapped(*args: Any, **kwargs: Any) -> Any:
            return self(handler, *args, **kwargs)

        return wrapped

    def __call__(self, handler: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Reset the idle timer, then call handler with the given arguments."""
        self.idle_timer.reset()
        return handler(*args, **kwargs)