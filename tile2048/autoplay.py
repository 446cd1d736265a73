import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.2  # seconds between autoplay moves


class AutoplayDriver:
    """
    Repeating task that calls ``step`` every ``interval`` seconds on a worker thread.

    ``step`` returns False when play should end (game over); the driver then
    stops on its own and fires ``on_stop``. ``stop()`` cancels between steps.
    ``running`` is already False when ``on_stop`` fires, so the callback may
    start the driver again.
    """

    def __init__(self,
                 step: Callable[[], bool],
                 interval: float = DEFAULT_INTERVAL,
                 on_stop: Optional[Callable[[], None]] = None,
                 name: str = "autoplay"):
        assert interval >= 0, "interval must be non-negative"
        self.step = step
        self.interval = interval
        self.on_stop = on_stop
        self.name = name
        self.steps_taken = 0

        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        # Cleared by the worker before on_stop; _worker is kept for join()
        self._thread: Optional[threading.Thread] = None
        self._worker: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start the loop. Returns False if it was already running."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return False
            self._stop_event = threading.Event()
            self.steps_taken = 0
            self._thread = threading.Thread(target=self._run, args=(self._stop_event,),
                                            name=self.name, daemon=True)
            self._worker = self._thread
            self._thread.start()
        logger.info(f"Autoplay started (interval {self.interval:.3f}s)")
        return True

    def stop(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        with self._lock:
            thread = self._worker
            self._stop_event.set()
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def toggle(self) -> bool:
        """Start if idle, stop if running. Returns the new running state."""
        if self.running:
            self.stop()
            return False
        return self.start()

    def join(self, timeout: Optional[float] = None) -> None:
        thread = self._worker
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self, stop_event: threading.Event) -> None:
        try:
            while not stop_event.is_set():
                if not self.step():
                    break
                self.steps_taken += 1
                if stop_event.wait(self.interval):
                    break
        except Exception:
            logger.exception("Autoplay step failed")
            raise
        finally:
            stop_event.set()
            logger.info(f"Autoplay stopped after {self.steps_taken} moves")
            with self._lock:
                if self._thread is threading.current_thread():
                    self._thread = None
            if self.on_stop is not None:
                self.on_stop()
