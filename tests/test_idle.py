import threading

import pytest

from remotecache.idle import IdleTimer


def test_idle_timer():
    fired = threading.Event()
    timer = IdleTimer(1.0, fired.set)
    timer.start()
    try:
        for _ in range(5):
            assert not fired.wait(0.5), "unexpected timeout"
            timer.reset()
        assert fired.wait(2.0), "expected idle timer to trigger"
    finally:
        timer.stop()


def test_stop_prevents_firing():
    fired = threading.Event()
    timer = IdleTimer(0.1, fired.set, tick=0.05)
    timer.start()
    timer.stop()
    assert not fired.wait(0.4)


def test_fires_only_once():
    firings = threading.Semaphore(0)
    timer = IdleTimer(0.1, firings.release, tick=0.02)
    timer.start()
    try:
        assert firings.acquire(timeout=2.0), "expected idle timer to trigger"
        assert not firings.acquire(timeout=0.3), "idle timer fired twice"
    finally:
        timer.stop()


def test_double_start_raises():
    timer = IdleTimer(10.0, lambda: None, tick=0.05)
    timer.start()
    try:
        with pytest.raises(RuntimeError):
            timer.start()
    finally:
        timer.stop()