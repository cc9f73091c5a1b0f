#!/usr/bin/env python3
"""
Team presence: who else has spent time in the focused file.
"""

import threading
from typing import Callable, Dict, Optional

from .logger import PluginLogger
from .models import DispatchStatus, EditorDocument, Outcome, TeamCacheEntry
from .status import YOU_TOOLTIP, StatusBar
from .transport import Transport
from .utils import run_in_thread


class TeamPresenceCache:
    """Per-file cache of file experts results.

    A missing key means "never fetched" and triggers a fetch. A stored entry
    with neither side set means "fetched, nobody" and is served from cache.
    Entries live for the whole session.
    """

    def __init__(
        self,
        transport: Transport,
        status_bar: StatusBar,
        is_team_available: Callable[[], bool],
        logger: Optional[PluginLogger] = None,
        runner: Callable[[Callable[[], None]], None] = run_in_thread,
        enabled: bool = True,
    ):
        self.transport = transport
        self.status_bar = status_bar
        self.is_team_available = is_team_available
        self.logger = logger or PluginLogger()
        self.runner = runner
        self.enabled = enabled
        self.entries: Dict[str, TeamCacheEntry] = {}
        self.focused_file: Optional[str] = None
        self._lock = threading.RLock()

    def focus(self, file: str, document: EditorDocument) -> Optional[TeamCacheEntry]:
        """Track a newly focused file, clear the old text and look it up."""
        with self._lock:
            self.focused_file = file
        self.status_bar.clear_team()
        return self.lookup(file, document)

    def lookup(self, file: str, document: EditorDocument) -> Optional[TeamCacheEntry]:
        """Return the cached entry for ``file`` or start a fetch for it.

        Returns None on a miss; the fetched result is shown later if ``file``
        is still focused by then.
        """
        if not self.enabled or not self.is_team_available():
            return None
        if not self.transport.is_available():
            return None

        with self._lock:
            self.focused_file = file
            entry = self.entries.get(file)
            if entry is not None:
                self.show(entry)
                return entry

        self.runner(lambda: self._fetch(file, document))
        return None

    def _fetch(self, file: str, document: EditorDocument) -> None:
        try:
            outcome = self.transport.fetch_file_experts(file, document)
        except Exception as e:
            self.logger.debug_exception(e)
            return
        self.apply(file, outcome)

    def apply(self, file: str, outcome: Outcome) -> None:
        """Store a fetch result and show it if ``file`` is still focused."""
        status = outcome.status

        if status == DispatchStatus.OFFLINE:
            return

        if status == DispatchStatus.PARSE_ERROR:
            self.logger.debug(
                f"Error parsing devs for file as json:\n{outcome.raw}\n"
                f"Check your {self.transport.diagnostics_hint()} file for more details."
            )
            return

        with self._lock:
            is_focused = file == self.focused_file

            if status != DispatchStatus.ACCEPTED:
                if status == DispatchStatus.AUTH_ERROR:
                    self.logger.error("Invalid Api Key; Make sure your Api Key is correct!")
                else:
                    self.logger.debug(
                        f"Error fetching devs for file ({outcome.code}); Check your "
                        f"{self.transport.diagnostics_hint()} file for more details."
                    )
                if is_focused:
                    self.status_bar.clear_team()
                return

            entry = outcome.data
            if entry is not None:
                self.entries[file] = entry

            if not is_focused:
                self.logger.debug(f"Dropping devs for {file}, no longer focused.")
                return

            if entry is None:
                self.status_bar.clear_team()
            else:
                self.show(entry)

    def show(self, entry: TeamCacheEntry) -> None:
        if entry.you:
            self.status_bar.update_team_you(
                f"You: {entry.you.total_text}", YOU_TOOLTIP
            )
        else:
            self.status_bar.update_team_you()

        if entry.other:
            self.status_bar.update_team_other(
                f"{entry.other.display_name}: {entry.other.total_text}",
                f"{entry.other.long_name}'s total time spent in this file",
            )
        else:
            self.status_bar.update_team_other()

    def get(self, file: str) -> Optional[TeamCacheEntry]:
        return self.entries.get(file)

    def clear(self) -> None:
        with self._lock:
            self.entries.clear()
            self.focused_file = None
