"""Run a blocking call on a worker thread while animating a spinner."""

import threading
import time
from collections.abc import Callable
from typing import Any, TypeVar

from rich.console import Console
from rich.live import Live
from rich.text import Text

SPINNER_FRAMES = ("|", "/", "-", "\\")
POLL_INTERVAL_S = 0.2

T = TypeVar("T")


class _WorkerResult:
    def __init__(self):
        self.value: Any = None
        self.error: BaseException | None = None
        self.done = threading.Event()


def run_with_spinner(
    func: Callable[..., T],
    *args: Any,
    message: str,
    console: Console,
    interval: float = POLL_INTERVAL_S,
) -> T:
    """Call func(*args) on a worker thread, spinning until it finishes.

    Exceptions raised by func are re-raised in the calling thread.
    """
    result = _WorkerResult()

    def worker() -> None:
        try:
            result.value = func(*args)
        except BaseException as e:
            result.error = e
        finally:
            result.done.set()

    thread = threading.Thread(target=worker, name="mawaku-worker", daemon=True)
    thread.start()

    frame = 0
    with Live(
        Text(f"{SPINNER_FRAMES[0]} {message}"),
        console=console,
        transient=True,
        auto_refresh=False,
    ) as live:
        while not result.done.is_set():
            live.update(Text(f"{SPINNER_FRAMES[frame % len(SPINNER_FRAMES)]} {message}"), refresh=True)
            frame += 1
            time.sleep(interval)

    thread.join()

    if result.error is not None:
        raise result.error
    return result.value
