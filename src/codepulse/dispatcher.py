#!/usr/bin/env python3
"""
Heartbeat dispatcher.
Sends accepted heartbeats through the configured transport and turns the
outcome into status bar state.
"""

from typing import Callable, Optional

from .logger import PluginLogger
from .models import DispatchStatus, HeartbeatEvent, Outcome
from .status import OFFLINE_TOOLTIP, StatusBar
from .transport import Transport


class HeartbeatDispatcher:
    """Fire-and-forget delivery with classification, no retries.

    The next natural heartbeat is the retry: heartbeats are frequent and the
    backend tolerates gaps.
    """

    def __init__(
        self,
        transport: Transport,
        status_bar: StatusBar,
        logger: Optional[PluginLogger] = None,
        on_accepted: Optional[Callable[[], None]] = None,
        on_auth_error: Optional[Callable[[], None]] = None,
    ):
        self.transport = transport
        self.status_bar = status_bar
        self.logger = logger or PluginLogger()
        self.on_accepted = on_accepted
        self.on_auth_error = on_auth_error

    def dispatch(self, event: HeartbeatEvent) -> Outcome:
        """Send one heartbeat and apply its classification. Never raises."""
        try:
            outcome = self.transport.send_heartbeat(event)
        except Exception as e:
            self.logger.debug_exception(e)
            outcome = Outcome(DispatchStatus.UNKNOWN, message=str(e))

        self.handle_outcome(outcome)
        return outcome

    def error_message(self, outcome: Outcome) -> str:
        code = "" if outcome.code is None else outcome.code
        hint = self.transport.diagnostics_hint()
        if outcome.status == DispatchStatus.CONFIG_ERROR:
            return f"Config parsing error ({code}); Check your {hint} file for more details"
        if outcome.status == DispatchStatus.AUTH_ERROR:
            return f"Invalid Api Key ({code}); Make sure your Api Key is correct!"
        if outcome.message and outcome.code is None:
            return f"Error sending heartbeat ({outcome.message}); Check your {hint} file for more details"
        return f"Unknown Error ({code}); Check your {hint} file for more details"

    def handle_outcome(self, outcome: Outcome) -> None:
        status_bar = self.status_bar
        status = outcome.status

        if status == DispatchStatus.ACCEPTED:
            status_bar.set_status(status)
            if self.on_accepted and status_bar.visible:
                self.on_accepted()
            return

        if status == DispatchStatus.OFFLINE:
            status_bar.set_status(status)
            if status_bar.visible:
                if not status_bar.show_coding_activity:
                    status_bar.update_text()
                status_bar.update_tooltip(OFFLINE_TOOLTIP)
            self.logger.warn(
                f"Working offline ({outcome.code}); Check your "
                f"{self.transport.diagnostics_hint()} file for more details"
            )
            return

        error_msg = self.error_message(outcome)
        if status_bar.visible:
            status_bar.show_error(error_msg, status)
        else:
            status_bar.set_status(status)
        self.logger.error(error_msg)

        if status == DispatchStatus.AUTH_ERROR and self.on_auth_error:
            self.on_auth_error()
