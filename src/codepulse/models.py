#!/usr/bin/env python3
"""
Data model for the CodePulse heartbeat engine.
Plain dataclasses shared by the gate, caches, dispatcher and transports.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Category(str, Enum):
    """Activity category attached to a heartbeat."""

    NONE = ""
    DEBUGGING = "debugging"
    BUILDING = "building"
    CODE_REVIEWING = "code reviewing"

    @classmethod
    def from_flags(
        cls, is_debugging: bool, is_compiling: bool, is_review: bool = False
    ) -> "Category":
        """Pick the category by priority: debugging > building > reviewing."""
        if is_debugging:
            return cls.DEBUGGING
        if is_compiling:
            return cls.BUILDING
        if is_review:
            return cls.CODE_REVIEWING
        return cls.NONE


@dataclass
class EditorDocument:
    """Snapshot of the active editor as handed over by the editor adapter.

    Cursor positions are 0-based here, the way editors report them.
    """

    file_name: str
    uri: str = ""
    line_count: int = 0
    language_id: str = ""
    is_untitled: bool = False
    cursor_line: int = 0
    cursor_character: int = 0
    project_name: str = ""
    project_folder: str = ""


@dataclass(frozen=True)
class HeartbeatEvent:
    """One observed moment of activity. Cursor positions are 1-based."""

    file_path: str
    timestamp: float
    cursor_line: int
    cursor_column: int
    total_lines: int
    is_write: bool = False
    category: Category = Category.NONE
    is_unsaved: bool = False
    project_name: Optional[str] = None
    project_root_path: Optional[str] = None
    language: Optional[str] = None


@dataclass
class SessionState:
    """Process-wide state of the last dispatched heartbeat."""

    last_file: str = ""
    last_heartbeat_at: float = 0.0
    last_debug_flag: bool = False
    last_compile_flag: bool = False
    is_compiling: bool = False
    is_debugging: bool = False

    def record_dispatch(
        self, event: HeartbeatEvent, is_debugging: bool, is_compiling: bool
    ) -> None:
        """Advance the state after a heartbeat has been handed to a transport.

        The flags are the ones the event was built from, not the live ones.
        """
        self.last_file = event.file_path
        self.last_heartbeat_at = event.timestamp
        self.last_debug_flag = is_debugging
        self.last_compile_flag = is_compiling


@dataclass
class DedupeRecord:
    line: int
    column: int
    last_heartbeat_at: float


@dataclass(frozen=True)
class DeveloperTime:
    """Time a developer has spent in one file."""

    total_text: str
    display_name: str = ""
    long_name: str = ""


@dataclass(frozen=True)
class TeamCacheEntry:
    """Result of a file experts query. Both sides empty means "no data"."""

    you: Optional[DeveloperTime] = None
    other: Optional[DeveloperTime] = None


@dataclass(frozen=True)
class TodaySummary:
    text: str
    has_team_features: bool = False


@dataclass
class ActivitySummaryState:
    last_fetch_at: float = 0.0
    has_team_features: bool = False


class DispatchStatus(str, Enum):
    """Transport-agnostic classification of an outbound call."""

    ACCEPTED = "accepted"
    OFFLINE = "offline"
    CONFIG_ERROR = "config_error"
    AUTH_ERROR = "auth_error"
    UNKNOWN = "unknown"
    PARSE_ERROR = "parse_error"


@dataclass
class Outcome:
    """What a transport call produced.

    ``code`` is the raw exit code or HTTP status (None when the call never
    completed), ``data`` the parsed body for query calls and ``raw`` the
    unparsed output kept for diagnostics.
    """

    status: DispatchStatus
    code: Optional[int] = None
    data: Any = None
    raw: str = ""
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == DispatchStatus.ACCEPTED
