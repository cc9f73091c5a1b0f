#!/usr/bin/env python3
"""
Status values handed to the editor's status bar.
The UI renders them; this module only decides what they say.
"""

import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .models import DispatchStatus

PRODUCT = "CodePulse"
ERROR_TEXT = f"{PRODUCT} Error"
OFFLINE_TOOLTIP = (
    f"{PRODUCT}: working offline... coding activity will sync next time we are online"
)
TODAY_TOOLTIP = f"{PRODUCT}: Today's coding time. Click to visit dashboard."
CALCULATING_TOOLTIP = f"{PRODUCT}: Calculating time spent today in background..."
YOU_TOOLTIP = "Your total time spent in this file"
OTHER_TOOLTIP = "Developer with the most time spent in this file"


@dataclass
class StatusSnapshot:
    """Immutable copy of everything the UI shows."""

    text: str
    tooltip: str
    status: Optional[DispatchStatus]
    team_you_text: str
    team_you_tooltip: str
    team_other_text: str
    team_other_tooltip: str
    visible: bool


class StatusBar:
    """Holds the status bar item values and notifies the UI when they change."""

    def __init__(self, on_change: Optional[Callable[[StatusSnapshot], None]] = None):
        self.on_change = on_change
        self._lock = threading.Lock()
        self.visible = True
        self.show_coding_activity = True
        self.text = ""
        self.tooltip = ""
        self.status: Optional[DispatchStatus] = None
        self.team_you_text = ""
        self.team_you_tooltip = ""
        self.team_other_text = ""
        self.team_other_tooltip = ""

    def snapshot(self) -> StatusSnapshot:
        with self._lock:
            return StatusSnapshot(
                text=self.text,
                tooltip=self.tooltip,
                status=self.status,
                team_you_text=self.team_you_text,
                team_you_tooltip=self.team_you_tooltip,
                team_other_text=self.team_other_text,
                team_other_tooltip=self.team_other_tooltip,
                visible=self.visible,
            )

    def _changed(self) -> None:
        if self.on_change:
            self.on_change(self.snapshot())

    def set_visible(self, visible: bool) -> None:
        with self._lock:
            self.visible = visible
        self._changed()

    def update_text(self, text: str = "") -> None:
        with self._lock:
            self.text = text
        self._changed()

    def update_tooltip(self, tooltip: str) -> None:
        with self._lock:
            self.tooltip = tooltip
        self._changed()

    def set_status(self, status: DispatchStatus) -> None:
        with self._lock:
            self.status = status

    def showing_error(self) -> bool:
        return "Error" in self.text

    def show_error(self, message: str, status: DispatchStatus) -> None:
        """Switch the status bar into its error state."""
        with self._lock:
            self.status = status
            self.text = ERROR_TEXT
            self.tooltip = f"{PRODUCT}: {message}"
        self._changed()

    def update_team_you(self, text: str = "", tooltip: str = YOU_TOOLTIP) -> None:
        with self._lock:
            self.team_you_text = text
            self.team_you_tooltip = tooltip if text else ""
        self._changed()

    def update_team_other(self, text: str = "", tooltip: str = OTHER_TOOLTIP) -> None:
        with self._lock:
            self.team_other_text = text
            self.team_other_tooltip = tooltip if text else ""
        self._changed()

    def clear_team(self) -> None:
        self.update_team_you()
        self.update_team_other()
