import threading
import time

from idle_timer import IdleResetTimer


class FireCounter:
    def __init__(self):
        self.count = 0
        self.fired = threading.Event()

    def __call__(self):
        self.count += 1
        self.fired.set()


def test_fires_after_reset():
    counter = FireCounter()
    timer = IdleResetTimer(counter)
    assert not timer.armed
    timer.reset_to(0.05)
    assert timer.armed
    assert counter.fired.wait(1.0)
    time.sleep(0.05)
    assert counter.count == 1
    assert not timer.armed


def test_stop_suppresses_pending_firing():
    counter = FireCounter()
    timer = IdleResetTimer(counter, initial_seconds=0.1)
    timer.stop()
    assert not timer.armed
    time.sleep(0.3)
    assert counter.count == 0


def test_stop_when_idle_is_noop():
    timer = IdleResetTimer(FireCounter())
    timer.stop()
    timer.stop()
    assert not timer.armed


def test_last_reset_wins_without_duplicate_firing():
    counter = FireCounter()
    timer = IdleResetTimer(counter)
    timer.reset_to(0.4)
    timer.reset_to(0.05)
    assert counter.fired.wait(1.0)
    time.sleep(0.6)
    assert counter.count == 1


def test_reset_postpones_firing():
    counter = FireCounter()
    timer = IdleResetTimer(counter, initial_seconds=0.05)
    timer.reset_to(10)
    time.sleep(0.2)
    assert counter.count == 0
    timer.stop()


def test_stale_generation_does_not_fire():
    counter = FireCounter()
    timer = IdleResetTimer(counter)
    timer.reset_to(10)
    timer._fire(0)
    assert counter.count == 0
    timer.stop()


def test_stop_waits_for_firing_in_progress():
    order = []
    entered = threading.Event()
    release = threading.Event()

    def slow_idle_screen():
        entered.set()
        release.wait(2.0)
        order.append("idle drawn")

    timer = IdleResetTimer(slow_idle_screen)
    timer.reset_to(0.01)
    assert entered.wait(1.0)

    def stop_then_echo():
        timer.stop()
        order.append("echo drawn")

    stopper = threading.Thread(target=stop_then_echo)
    stopper.start()
    time.sleep(0.1)
    assert stopper.is_alive()
    release.set()
    stopper.join(2.0)
    assert order == ["idle drawn", "echo drawn"]
