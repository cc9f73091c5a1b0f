#!/usr/bin/env python3
"""
Heartbeat gate: decides whether a settled editor state is worth reporting.
"""

from typing import Optional

from .models import SessionState

HEARTBEAT_INTERVAL = 120.0  # seconds


class HeartbeatGate:
    """Compares the current editor state against the last dispatched heartbeat."""

    def __init__(self, state: SessionState, interval: float = HEARTBEAT_INTERVAL):
        self.state = state
        self.interval = interval

    def enough_time_passed(self, now: float) -> bool:
        return self.state.last_heartbeat_at + self.interval < now

    def should_send(
        self,
        file: str,
        now: float,
        is_write: bool,
        is_debugging: Optional[bool] = None,
        is_compiling: Optional[bool] = None,
    ) -> bool:
        """Return True if any heartbeat condition holds.

        A heartbeat is due on a save, after ``interval`` seconds, on a file
        switch, or when the debugging or compiling flag flipped. The flags
        default to the live session flags.
        """
        state = self.state
        if is_debugging is None:
            is_debugging = state.is_debugging
        if is_compiling is None:
            is_compiling = state.is_compiling
        return (
            is_write
            or self.enough_time_passed(now)
            or file != state.last_file
            or is_debugging != state.last_debug_flag
            or is_compiling != state.last_compile_flag
        )
