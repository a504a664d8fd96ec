"""
The request currently being served, for code that records audit rows
without having the request passed down to it.
"""
import threading
from contextlib import contextmanager

_state = threading.local()


def current_request():
    return getattr(_state, "request", None)


@contextmanager
def bound_request(request):
    previous = current_request()
    _state.request = request
    try:
        yield request
    finally:
        _state.request = previous
