#!/usr/bin/env python3
"""
Transport interface for heartbeat delivery and summary queries.
Both the cli subprocess backend and the HTTP backend implement it.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .models import (
    DeveloperTime,
    DispatchStatus,
    EditorDocument,
    HeartbeatEvent,
    Outcome,
)

CLI_OFFLINE_CODES = (102, 112)
CLI_CONFIG_ERROR_CODE = 103
CLI_AUTH_ERROR_CODE = 104

HTTP_ACCEPTED_CODES = (200, 201, 202)
HTTP_AUTH_ERROR_CODE = 401


def classify_exit_code(code: Optional[int]) -> DispatchStatus:
    """Map a cli exit code onto the dispatch taxonomy."""
    if code == 0:
        return DispatchStatus.ACCEPTED
    if code in CLI_OFFLINE_CODES:
        return DispatchStatus.OFFLINE
    if code == CLI_CONFIG_ERROR_CODE:
        return DispatchStatus.CONFIG_ERROR
    if code == CLI_AUTH_ERROR_CODE:
        return DispatchStatus.AUTH_ERROR
    return DispatchStatus.UNKNOWN


def classify_http_status(code: Optional[int]) -> DispatchStatus:
    """Map an HTTP status code onto the dispatch taxonomy."""
    if code in HTTP_ACCEPTED_CODES:
        return DispatchStatus.ACCEPTED
    if code == HTTP_AUTH_ERROR_CODE:
        return DispatchStatus.AUTH_ERROR
    return DispatchStatus.UNKNOWN


def parse_developer(entry: Optional[dict]) -> Optional[DeveloperTime]:
    """Parse one ``{user: {...}, total: {text}}`` file experts entry.

    Raises KeyError/TypeError on a malformed entry.
    """
    if not entry:
        return None
    user = entry.get("user") or {}
    return DeveloperTime(
        total_text=entry["total"]["text"],
        display_name=user.get("name") or "",
        long_name=user.get("long_name") or user.get("name") or "",
    )


class Transport(ABC):
    """Delivers heartbeats and runs the two summary queries."""

    name = "transport"

    def is_available(self) -> bool:
        return True

    @abstractmethod
    def send_heartbeat(self, event: HeartbeatEvent) -> Outcome:
        """Send one heartbeat; ``Outcome.status`` carries the classification."""

    @abstractmethod
    def fetch_today(self) -> Outcome:
        """Fetch today's coding time; ``Outcome.data`` is a TodaySummary or None."""

    @abstractmethod
    def fetch_file_experts(self, file: str, document: EditorDocument) -> Outcome:
        """Fetch who worked on ``file``; ``Outcome.data`` is a TeamCacheEntry or None."""

    def diagnostics_hint(self) -> str:
        """Where the user should look for details about a failure."""
        return "log"
