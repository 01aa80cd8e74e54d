import threading
import time

import pytest

from remotecache.idle import IdleTimer
from remotecache.idle_interceptor import IdleResettingHandler


class _RecordingTimer:
    def __init__(self, log):
        self.log = log

    def reset(self):
        self.log.append("reset")


def test_call_resets_before_handler():
    log = []
    interceptor = IdleResettingHandler(_RecordingTimer(log))

    def handler(request, *, context):
        log.append("handler")
        return (request, context)

    assert interceptor(handler, "req", context="ctx") == ("req", "ctx")
    assert log == ["reset", "handler"]


def test_wrap_resets_on_every_call():
    log = []
    interceptor = IdleResettingHandler(_RecordingTimer(log))

    def get_blob(name):
        return name.upper()

    wrapped = interceptor.wrap(get_blob)
    assert [wrapped("a"), wrapped("b")] == ["A", "B"]
    assert log == ["reset", "reset"]
    assert wrapped.__name__ == "get_blob"


def test_handler_errors_propagate_after_reset():
    log = []
    interceptor = IdleResettingHandler(_RecordingTimer(log))

    def failing():
        raise KeyError("missing")

    with pytest.raises(KeyError):
        interceptor.wrap(failing)()
    assert log == ["reset"]


def test_requests_keep_idle_timer_from_firing():
    fired = threading.Event()
    timer = IdleTimer(0.5, fired.set, tick=0.05)
    wrapped = IdleResettingHandler(timer).wrap(lambda: None)
    timer.start()
    try:
        for _ in range(8):
            time.sleep(0.1)
            wrapped()
            assert not fired.is_set()
        assert fired.wait(3)
    finally:
        timer.stop()