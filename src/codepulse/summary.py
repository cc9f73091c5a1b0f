#!/usr/bin/env python3
"""
Today's coding time for the status bar, fetched at most once per interval.
"""

import threading
import time
from typing import Callable, Optional

from .logger import PluginLogger
from .models import ActivitySummaryState, DispatchStatus, Outcome, TodaySummary
from .status import CALCULATING_TOOLTIP, TODAY_TOOLTIP, StatusBar
from .transport import Transport
from .utils import run_in_thread

FETCH_TODAY_INTERVAL = 60.0  # seconds


class ActivitySummaryCache:
    """Throttled fetch of today's total and the team features flag.

    ``last_fetch_at`` is taken before the fetch starts, so triggers that
    overlap an in-flight fetch inside the interval are dropped.
    """

    def __init__(
        self,
        transport: Transport,
        status_bar: StatusBar,
        logger: Optional[PluginLogger] = None,
        interval: float = FETCH_TODAY_INTERVAL,
        runner: Callable[[Callable[[], None]], None] = run_in_thread,
        clock: Callable[[], float] = time.time,
        has_api_key: Optional[Callable[[], bool]] = None,
        on_updated: Optional[Callable[[], None]] = None,
    ):
        self.transport = transport
        self.status_bar = status_bar
        self.logger = logger or PluginLogger()
        self.interval = interval
        self.runner = runner
        self.clock = clock
        self.has_api_key = has_api_key or (lambda: True)
        self.on_updated = on_updated
        self.state = ActivitySummaryState()
        self.summary: Optional[TodaySummary] = None
        self._lock = threading.Lock()

    @property
    def has_team_features(self) -> bool:
        return self.state.has_team_features

    def request_refresh(self) -> bool:
        """Start a fetch unless one ran within the interval.

        Returns True when a fetch was started.
        """
        if not self.status_bar.visible:
            return False

        with self._lock:
            now = self.clock()
            if not now - self.state.last_fetch_at > self.interval:
                return False
            self.state.last_fetch_at = now

        if not self.has_api_key():
            return False
        if not self.transport.is_available():
            return False

        self.runner(self._fetch)
        return True

    def _fetch(self) -> None:
        try:
            outcome = self.transport.fetch_today()
        except Exception as e:
            self.logger.debug_exception(e)
            return
        self.apply(outcome)

    def apply(self, outcome: Outcome) -> None:
        """Apply a fetch result to the summary state and status bar."""
        status = outcome.status

        if status == DispatchStatus.OFFLINE:
            return

        if status == DispatchStatus.PARSE_ERROR:
            self.logger.debug(
                f"Error parsing today coding activity as json:\n{outcome.raw}\n"
                f"Check your {self.transport.diagnostics_hint()} file for more details."
            )
            return

        if status == DispatchStatus.AUTH_ERROR:
            error_msg = f"Invalid Api Key ({outcome.code}); Make sure your Api Key is correct!"
            if self.status_bar.visible:
                self.status_bar.show_error(error_msg, status)
            self.logger.error(error_msg)
            return

        if status != DispatchStatus.ACCEPTED:
            self.logger.debug(
                f"Error fetching today coding activity ({outcome.code}); Check your "
                f"{self.transport.diagnostics_hint()} file for more details."
            )
            return

        summary = outcome.data
        if summary is not None:
            self.summary = summary
            self.state.has_team_features = summary.has_team_features

        if not self.status_bar.visible:
            return

        if summary is not None and summary.text:
            if self.status_bar.show_coding_activity:
                self.status_bar.update_text(summary.text)
                self.status_bar.update_tooltip(TODAY_TOOLTIP)
            else:
                self.status_bar.update_text()
                self.status_bar.update_tooltip(summary.text)
        else:
            self.status_bar.update_text()
            self.status_bar.update_tooltip(CALCULATING_TOOLTIP)

        if self.on_updated:
            self.on_updated()
