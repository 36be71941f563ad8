import threading
import time

import pytest

from classes.errors import ComputeTimeout
from utils.pool import bounded_map


def test_results_keep_input_order():
    def slow_square(n):
        time.sleep(0.01 * (5 - n))
        return n * n

    assert bounded_map(slow_square, range(5), max_workers=4) == [0, 1, 4, 9, 16]


def test_concurrency_is_bounded():
    running = []
    peak = []
    lock = threading.Lock()

    def work(_):
        with lock:
            running.append(1)
            peak.append(len(running))
        time.sleep(0.02)
        with lock:
            running.pop()

    bounded_map(work, range(10), max_workers=3)

    assert max(peak) <= 3


def test_empty_input():
    assert bounded_map(lambda x: x, []) == []


def test_timeout_raises_compute_timeout():
    with pytest.raises(ComputeTimeout):
        bounded_map(lambda _: time.sleep(0.5), range(4), max_workers=2, timeout=0.05)


def test_worker_errors_propagate():
    def boom(n):
        if n == 2:
            raise ValueError("bad item")
        return n

    with pytest.raises(ValueError):
        bounded_map(boom, range(4), max_workers=2)
