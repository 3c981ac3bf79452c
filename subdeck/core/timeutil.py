"""Epoch-millisecond timestamps used across the datastore."""
import time


def now_ms() -> int:
    return int(time.time() * 1000)
