#!/usr/bin/env python3
"""
Duplicate suppression for save-triggered heartbeats.
"""

from typing import Dict, Optional

from .models import DedupeRecord

DEDUPE_WINDOW = 30 * 60.0  # seconds


class DuplicateSuppressor:
    """Keeps one cursor record per file and flags repeated saves.

    A save is a duplicate when the previous record for the same file is older
    than the window and the cursor has not moved. The record is overwritten on
    every check, duplicate or not.
    """

    def __init__(self, window: float = DEDUPE_WINDOW):
        self.window = window
        self.records: Dict[str, DedupeRecord] = {}

    def is_duplicate(self, file: str, now: float, line: int, column: int) -> bool:
        record = self.records.get(file)
        duplicate = (
            record is not None
            and record.last_heartbeat_at + self.window < now
            and record.line == line
            and record.column == column
        )
        self.records[file] = DedupeRecord(
            line=line, column=column, last_heartbeat_at=now
        )
        return duplicate

    def get(self, file: str) -> Optional[DedupeRecord]:
        return self.records.get(file)

    def clear(self) -> None:
        self.records.clear()
