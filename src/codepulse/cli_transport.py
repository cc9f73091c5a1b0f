#!/usr/bin/env python3
"""
Heartbeat transport backed by the CodePulse command line tool.
Each call runs the cli as a subprocess and reads its exit code and output.
"""

import json
import subprocess  # nosec B404 - Required to run the CodePulse cli
from pathlib import Path
from typing import List, Optional

from .logger import PluginLogger
from .models import (
    Category,
    DispatchStatus,
    EditorDocument,
    HeartbeatEvent,
    Outcome,
    TeamCacheEntry,
    TodaySummary,
)
from .transport import Transport, classify_exit_code, parse_developer
from .utils import api_key_invalid, format_arguments


class CliTransport(Transport):
    """Runs the cli binary for heartbeats, today's summary and file experts."""

    name = "cli"

    def __init__(
        self,
        binary: str,
        user_agent: str,
        logger: Optional[PluginLogger] = None,
        api_key: str = "",
        api_url: str = "",
        config_file: Optional[str] = None,
        log_file: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the cli transport.

        Args:
            binary: Path to the cli executable.
            user_agent: Value for --plugin.
            logger: Logger for debug output.
            api_key: Key forwarded with --key when it is valid.
            api_url: Url forwarded with --api-url when set.
            config_file: Passed as --config together with log_file.
            log_file: Passed as --log-file together with config_file.
            timeout: Subprocess timeout in seconds, None waits forever.
        """
        self.binary = str(binary)
        self.user_agent = user_agent
        self.logger = logger or PluginLogger()
        self.api_key = api_key
        self.api_url = api_url
        self.config_file = config_file
        self.log_file = log_file
        self.timeout = timeout

    def is_available(self) -> bool:
        return Path(self.binary).is_file()

    def diagnostics_hint(self) -> str:
        return self.log_file or "~/.codepulse/codepulse.log"

    def _common_args(self) -> List[str]:
        args: List[str] = []
        if not api_key_invalid(self.api_key):
            args.extend(["--key", self.api_key])
        if self.api_url:
            args.extend(["--api-url", self.api_url])
        return args

    def _config_args(self, log_flag: str) -> List[str]:
        if self.config_file and self.log_file:
            return ["--config", self.config_file, log_flag, self.log_file]
        return []

    def build_heartbeat_args(self, event: HeartbeatEvent) -> List[str]:
        """Build the cli arguments for a heartbeat. Language is left to the cli."""
        args = ["--entity", event.file_path, "--plugin", self.user_agent]
        args.extend(["--lineno", str(event.cursor_line)])
        args.extend(["--cursorpos", str(event.cursor_column)])
        args.extend(["--lines-in-file", str(event.total_lines)])
        if event.category != Category.NONE:
            args.extend(["--category", event.category.value])

        args.extend(self._common_args())

        if event.project_name:
            args.extend(["--alternate-project", event.project_name])
        if event.project_root_path:
            args.extend(["--project-folder", event.project_root_path])
        if event.is_write:
            args.append("--write")

        args.extend(self._config_args("--log-file"))

        if event.is_unsaved:
            args.append("--is-unsaved-entity")
        return args

    def build_today_args(self) -> List[str]:
        args = ["--today", "--output", "json", "--plugin", self.user_agent]
        args.extend(self._common_args())
        args.extend(self._config_args("--logfile"))
        return args

    def build_file_experts_args(self, file: str, document: EditorDocument) -> List[str]:
        args = ["--output", "json", "--plugin", self.user_agent]
        args.extend(["--file-experts", file])
        args.extend(["--entity", file])
        args.extend(self._common_args())
        if document.project_name:
            args.extend(["--alternate-project", document.project_name])
        if document.project_folder:
            args.extend(["--project-folder", document.project_folder])
        args.extend(self._config_args("--logfile"))
        if document.is_untitled:
            args.append("--is-unsaved-entity")
        return args

    def _run(self, args: List[str], description: str) -> Outcome:
        """Run the cli and classify its exit code."""
        self.logger.debug(f"{description}: {format_arguments(self.binary, args)}")
        try:
            proc = subprocess.run(  # nosec B603 - arguments are never shell-parsed
                [self.binary] + args,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            self.logger.debug_exception(e)
            return Outcome(DispatchStatus.UNKNOWN, message=str(e))

        if proc.returncode != 0:
            if proc.stderr:
                self.logger.debug(proc.stderr.strip())
            if proc.stdout:
                self.logger.debug(proc.stdout.strip())

        return Outcome(
            classify_exit_code(proc.returncode),
            code=proc.returncode,
            raw=proc.stdout or "",
        )

    def send_heartbeat(self, event: HeartbeatEvent) -> Outcome:
        return self._run(self.build_heartbeat_args(event), "Sending heartbeat")

    def fetch_today(self) -> Outcome:
        outcome = self._run(
            self.build_today_args(), "Fetching coding activity for Today from api"
        )
        if not outcome.ok or not outcome.raw.strip():
            return outcome

        try:
            data = json.loads(outcome.raw)
            outcome.data = TodaySummary(
                text=(data.get("text") or "").strip(),
                has_team_features=bool(data.get("has_team_features")),
            )
        except (ValueError, AttributeError) as e:
            outcome.status = DispatchStatus.PARSE_ERROR
            outcome.message = str(e)
        return outcome

    def fetch_file_experts(self, file: str, document: EditorDocument) -> Outcome:
        outcome = self._run(
            self.build_file_experts_args(file, document),
            "Fetching devs for file from api",
        )
        if not outcome.ok or not outcome.raw.strip():
            return outcome

        try:
            data = json.loads(outcome.raw)
            outcome.data = TeamCacheEntry(
                you=parse_developer(data.get("you")),
                other=parse_developer(data.get("other")),
            )
        except (ValueError, AttributeError, KeyError, TypeError) as e:
            outcome.status = DispatchStatus.PARSE_ERROR
            outcome.message = str(e)
        return outcome
