#!/usr/bin/env python3
"""
CodePulse heartbeat engine.
Turns editor activity into heartbeats and keeps the status bar values current.
"""

import threading
import time
from typing import Callable, Optional

from . import __version__
from .cli_transport import CliTransport
from .coalescer import EventCoalescer, EventKind
from .config import Config, get_api_key_from_env, get_api_url_from_env, get_config
from .dedupe import DuplicateSuppressor
from .dispatcher import HeartbeatDispatcher
from .gate import HeartbeatGate
from .http_transport import HttpTransport
from .logger import LogLevel, PluginLogger
from .models import Category, EditorDocument, HeartbeatEvent, SessionState
from .presence import TeamPresenceCache
from .status import PRODUCT, StatusBar
from .summary import ActivitySummaryCache
from .transport import Transport
from .utils import (
    api_key_invalid,
    build_user_agent,
    entity_for,
    is_pull_request,
    run_in_thread,
)


def create_transport(
    config: Config,
    logger: PluginLogger,
    editor_name: str = "vscode",
    editor_version: str = "0.0.0",
) -> Transport:
    """Build the transport selected by the ``transport`` setting."""
    user_agent = build_user_agent(editor_name, editor_version, __version__)

    if config.transport == "http":
        return HttpTransport(
            api_url=config.api_url,
            api_key=config.api_key or get_api_key_from_env(),
            user_agent=user_agent,
            logger=logger,
            hide_categories=config.status_bar_hide_categories,
            timeout=config.http_timeout,
            get_api_key=lambda: config.api_key or get_api_key_from_env(),
        )

    use_config_flags = bool(config.get("config_file_flag"))
    return CliTransport(
        binary=str(config.cli_path),
        user_agent=user_agent,
        logger=logger,
        api_key=get_api_key_from_env(),
        api_url=get_api_url_from_env(),
        config_file=str(config.config_file) if use_config_flags else None,
        log_file=str(config.log_file) if use_config_flags else None,
    )


class HeartbeatEngine:
    """
    Owns the session state and wires editor signals through the pipeline:
    coalescer -> gate -> duplicate suppressor -> dispatcher -> transport.

    Editor adapters call the ``on_*`` methods; the UI reads ``status_bar``.
    """

    def __init__(
        self,
        transport: Transport,
        get_active_document: Callable[[], Optional[EditorDocument]],
        config: Optional[Config] = None,
        logger: Optional[PluginLogger] = None,
        status_bar: Optional[StatusBar] = None,
        clock: Callable[[], float] = time.time,
        runner: Callable[[Callable[[], None]], None] = run_in_thread,
        timer_factory=None,
        prompt_for_api_key: Optional[Callable[[], None]] = None,
        get_api_key: Optional[Callable[[], str]] = None,
    ):
        """
        Initialize the engine.

        Args:
            transport: Delivery backend for heartbeats and queries.
            get_active_document: Returns the focused document or None.
            config: Settings, the global config when None.
            logger: Plugin logger.
            status_bar: Status values shared with the UI.
            clock: Seconds since the epoch.
            runner: Runs detached outbound calls.
            timer_factory: Debounce timer factory, threading.Timer when None.
            prompt_for_api_key: Asks the user for a key.
            get_api_key: Returns the current api key.
        """
        self.config = config or get_config()
        self.logger = logger or PluginLogger()
        self.transport = transport
        self.get_active_document = get_active_document
        self.status_bar = status_bar or StatusBar()
        self.clock = clock
        self.runner = runner
        self.prompt_for_api_key = prompt_for_api_key
        self.get_api_key = get_api_key or (
            lambda: self.config.api_key or get_api_key_from_env()
        )

        self.disabled = self.config.disabled
        self.running = False
        self._lock = threading.RLock()

        self.session = SessionState()
        self.gate = HeartbeatGate(
            self.session, interval=float(self.config.get("heartbeat_interval", 120))
        )
        self.dedupe = DuplicateSuppressor(
            window=float(self.config.get("dedupe_window", 1800))
        )
        self.coalescer = EventCoalescer(
            self.evaluate,
            debounce_ms=int(self.config.get("debounce_ms", 50)),
            timer_factory=timer_factory,
        )

        self.status_bar.visible = self.config.status_bar_enabled
        self.status_bar.show_coding_activity = self.config.status_bar_coding_activity

        self.summary = ActivitySummaryCache(
            transport,
            self.status_bar,
            logger=self.logger,
            interval=float(self.config.get("fetch_today_interval", 60)),
            runner=runner,
            clock=clock,
            has_api_key=self.has_api_key,
            on_updated=self.refresh_presence,
        )
        self.presence = TeamPresenceCache(
            transport,
            self.status_bar,
            is_team_available=lambda: self.summary.has_team_features,
            logger=self.logger,
            runner=runner,
            enabled=self.config.status_bar_team,
        )
        self.dispatcher = HeartbeatDispatcher(
            transport,
            self.status_bar,
            logger=self.logger,
            on_accepted=self.summary.request_refresh,
            on_auth_error=self._on_auth_error,
        )

    # Lifecycle

    def start(self) -> None:
        """Apply settings and begin listening to editor signals."""
        if self.config.debug:
            self.logger.set_level(LogLevel.DEBUG)

        if self.disabled:
            self.dispose()
            return

        self.logger.debug(f"Initializing {PRODUCT} v{__version__}")
        self.status_bar.set_visible(self.config.status_bar_enabled)
        self.status_bar.update_text(f"{PRODUCT} Initializing...")
        if not self.has_api_key():
            self._prompt()

        self.running = True
        self.logger.debug(f"{PRODUCT} initialized")
        self.status_bar.update_text()
        self.status_bar.update_tooltip(f"{PRODUCT}: Initialized")
        self.summary.request_refresh()

    def dispose(self) -> None:
        """Stop reacting to editor signals. Pending debounce is cancelled."""
        self.coalescer.cancel()
        self.running = False

    def disable(self) -> None:
        """Stop reporting and drop all session state."""
        self.disabled = True
        self.config.disabled = True
        self.config.save()
        self.logger.debug("Extension disabled, will not report coding activity")
        self.dispose()
        with self._lock:
            self.session = SessionState()
            self.gate.state = self.session
            self.dedupe.clear()
            self.presence.clear()

    def enable(self) -> None:
        if not self.disabled:
            return
        self.disabled = False
        self.config.disabled = False
        self.config.save()
        self.start()

    # Settings

    def set_debug(self, enabled: bool) -> None:
        self.config.debug = enabled
        self.config.save()
        if enabled:
            self.logger.set_level(LogLevel.DEBUG)
            self.logger.debug("Debug enabled")
        else:
            self.logger.set_level(LogLevel.INFO)

    def set_status_bar_enabled(self, enabled: bool) -> None:
        self.config.set("status_bar_enabled", enabled)
        self.config.save()
        self.status_bar.set_visible(enabled)

    def set_coding_activity_enabled(self, enabled: bool) -> None:
        self.config.set("status_bar_coding_activity", enabled)
        self.config.save()
        self.status_bar.show_coding_activity = enabled
        if enabled:
            self.logger.debug("Coding activity in status bar has been enabled")
            self.summary.request_refresh()
        else:
            self.logger.debug("Coding activity in status bar has been disabled")
            if not self.status_bar.showing_error():
                self.status_bar.update_text()

    def set_team_enabled(self, enabled: bool) -> None:
        self.config.set("status_bar_team", enabled)
        self.config.save()
        self.presence.enabled = enabled
        if not enabled:
            self.status_bar.clear_team()

    # Editor signals

    def on_selection_changed(self) -> None:
        self._notify(EventKind.SELECTION)

    def on_active_editor_changed(self) -> None:
        self._notify(EventKind.FOCUS_CHANGE)

    def on_save(self) -> None:
        self._notify(EventKind.SAVE, is_write=True)

    def on_debug_session_changed(self) -> None:
        self._notify(EventKind.DEBUG)

    def on_debug_session_started(self) -> None:
        self.session.is_debugging = True
        self._notify(EventKind.DEBUG)

    def on_debug_session_terminated(self) -> None:
        self.session.is_debugging = False
        self._notify(EventKind.DEBUG)

    def on_task_started(self, is_background: bool = False, detail: str = "") -> None:
        """Mark a build as running. Background and watch tasks are not builds."""
        if is_background:
            return
        if detail and "watch" in detail:
            return
        self.session.is_compiling = True
        self._notify(EventKind.TASK)

    def on_task_ended(self) -> None:
        self.session.is_compiling = False
        self._notify(EventKind.TASK)

    def _notify(self, kind: EventKind, is_write: bool = False) -> None:
        if self.disabled:
            return
        self.coalescer.notify(kind, is_write)

    # Pipeline

    def has_api_key(self) -> bool:
        return not api_key_invalid(self.get_api_key())

    def _prompt(self) -> None:
        if self.prompt_for_api_key:
            self.prompt_for_api_key()

    def _on_auth_error(self) -> None:
        self._prompt()

    def build_event(
        self,
        document: EditorDocument,
        file: str,
        now: float,
        is_write: bool,
        is_debugging: bool = False,
        is_compiling: bool = False,
    ) -> HeartbeatEvent:
        """Capture a heartbeat from the document and the given session flags."""
        return HeartbeatEvent(
            file_path=file,
            timestamp=now,
            cursor_line=document.cursor_line + 1,
            cursor_column=document.cursor_character + 1,
            total_lines=document.line_count,
            is_write=is_write,
            category=Category.from_flags(
                is_debugging,
                is_compiling,
                is_pull_request(document.uri),
            ),
            is_unsaved=document.is_untitled,
            project_name=document.project_name or None,
            project_root_path=document.project_folder or None,
            language=document.language_id or None,
        )

    def evaluate(self, is_write: bool) -> Optional[HeartbeatEvent]:
        """Run the gate on the settled editor state.

        Returns the dispatched heartbeat, or None when nothing was sent.
        """
        if self.disabled:
            return None

        document = self.get_active_document()
        if document is None or not document.file_name:
            return None
        file = entity_for(document)

        with self._lock:
            if self.presence.focused_file != file:
                self.presence.focus(file, document)

            now = self.clock()
            # debug and task signals flip these from other threads
            is_debugging = self.session.is_debugging
            is_compiling = self.session.is_compiling
            if not self.gate.should_send(
                file, now, is_write, is_debugging, is_compiling
            ):
                return None

            if not self.has_api_key():
                self._prompt()
                return None
            if not self.transport.is_available():
                return None

            event = self.build_event(
                document, file, now, is_write, is_debugging, is_compiling
            )
            if is_write and self.dedupe.is_duplicate(
                file, now, event.cursor_line, event.cursor_column
            ):
                self.logger.debug(f"Skipping duplicate heartbeat for {file}")
                return None

            self.session.record_dispatch(event, is_debugging, is_compiling)

        self.runner(lambda: self.dispatcher.dispatch(event))
        return event

    def refresh_presence(self) -> None:
        """Look up team presence for the active document again."""
        document = self.get_active_document()
        if document is None or not document.file_name:
            return
        self.presence.lookup(entity_for(document), document)

    # Values for the UI

    @property
    def today_text(self) -> str:
        summary = self.summary.summary
        return summary.text if summary else ""

    def presence_text(self):
        snapshot = self.status_bar.snapshot()
        return snapshot.team_you_text, snapshot.team_other_text
