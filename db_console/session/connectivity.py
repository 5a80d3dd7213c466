"""Background connectivity polling."""

from __future__ import annotations

import threading
from typing import Callable

from db_console.api.client import ApiClient
from db_console.shared.exceptions import ApiError
from db_console.shared.logging import Logger, get_logger

StatusSink = Callable[[bool], None]

DEFAULT_INTERVAL = 5.0


class ConnectivityMonitor:
    """Poll the catalog endpoint on a fixed interval and report up/down.

    Polling runs on a daemon thread with its own API client so it never
    blocks, or is blocked by, the session's own requests. With ``owns_api``
    the monitor closes that client once its thread has finished.
    """

    def __init__(
        self,
        api: ApiClient,
        sink: StatusSink,
        *,
        interval: float = DEFAULT_INTERVAL,
        logger: Logger | None = None,
        owns_api: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._api = api
        self._sink = sink
        self.interval = interval
        self._logger = logger or get_logger()
        self._owns_api = owns_api
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.connected: bool | None = None

    def poll(self) -> bool:
        connected = self._check()
        self._sink(connected)
        return connected

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="connectivity-monitor", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop polling, waiting at most ``timeout`` (default: one interval).

        A check still waiting on the backend is abandoned to the daemon thread;
        its result is discarded.
        """
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is None:
            if self._owns_api:
                self._api.close()
            return
        thread.join(self.interval if timeout is None else timeout)
        if thread.is_alive():
            self._logger.debug("Connectivity check still in flight; leaving it to finish in the background.")

    def _check(self) -> bool:
        try:
            connected = self._api.ping()
        except ApiError as exc:
            self._logger.debug(f"Connectivity check failed: {exc}")
            connected = False
        self.connected = connected
        return connected

    def _run(self) -> None:
        # First poll happens immediately, then once per interval until stopped.
        try:
            while not self._stop.is_set():
                connected = self._check()
                if self._stop.is_set():
                    break
                self._sink(connected)
                self._stop.wait(self.interval)
        finally:
            if self._owns_api:
                self._api.close()
