"""
CodePulse - editor activity heartbeats.

This package contains the heartbeat engine of the CodePulse editor plugin:

- Debouncing of noisy editor events into single evaluations
- Deciding when a heartbeat is due and suppressing repeated saves
- Delivery through the CodePulse cli or directly over HTTP
- Throttled today's-coding-time and per-file team presence lookups
"""

__version__ = "1.2.0"
__license__ = "MIT"

from .engine import HeartbeatEngine, create_transport  # noqa: E402
from .models import DispatchStatus, EditorDocument, HeartbeatEvent  # noqa: E402

__all__ = [
    "HeartbeatEngine",
    "create_transport",
    "DispatchStatus",
    "EditorDocument",
    "HeartbeatEvent",
]
