"""Signal-based cancellation of a running pipeline."""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from types import FrameType

from profile8_fixer.errors import RunCancelledError

CANCEL_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _raise_cancelled(signum: int, frame: FrameType | None) -> None:
    del frame
    raise RunCancelledError(f"Run cancelled by {signal.Signals(signum).name}")


@contextmanager
def cancel_on_signals(enabled: bool = True) -> Iterator[None]:
    """Turn SIGINT/SIGTERM into ``RunCancelledError`` inside the block.

    Handlers can only be installed from the main thread; elsewhere, or when
    ``enabled`` is false, the block runs unchanged. Previous handlers are
    restored on exit.
    """
    if not enabled or threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = {signum: signal.getsignal(signum) for signum in CANCEL_SIGNALS}
    for signum in CANCEL_SIGNALS:
        signal.signal(signum, _raise_cancelled)
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
