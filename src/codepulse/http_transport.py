#!/usr/bin/env python3
"""
HTTP transport for CodePulse.
Handles all HTTP communication with the CodePulse api.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

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
from .transport import Transport, classify_http_status, parse_developer
from .utils import count_slashes_in_path


class HeartbeatPayloadBuilder:
    """Builds JSON bodies for the heartbeats and file experts endpoints."""

    def __init__(self, user_agent: str):
        self.user_agent = user_agent

    def create_heartbeat_payload(self, event: HeartbeatEvent) -> Dict[str, Any]:
        """Create payload for the heartbeats endpoint."""
        payload: Dict[str, Any] = {
            "type": "file",
            "entity": event.file_path,
            "time": event.timestamp,
            "plugin": self.user_agent,
            "lineno": str(event.cursor_line),
            "cursorpos": str(event.cursor_column),
            "lines": str(event.total_lines),
            "is_write": event.is_write,
        }

        if event.project_name:
            payload["project"] = event.project_name
        if event.language:
            payload["language"] = event.language

        folder = event.project_root_path
        if folder and event.file_path.startswith(folder):
            payload["project_root_count"] = count_slashes_in_path(folder)

        if event.category != Category.NONE:
            payload["category"] = event.category.value
        if event.is_unsaved:
            payload["is_unsaved_entity"] = True

        return payload

    def create_file_experts_payload(
        self, file: str, document: EditorDocument
    ) -> Optional[Dict[str, Any]]:
        """Create payload for the file experts endpoint.

        Returns None when the file is not inside a named project, the api
        cannot attribute it to a team in that case.
        """
        if not document.project_name:
            return None
        folder = document.project_folder
        if not folder or not file.startswith(folder):
            return None

        return {
            "entity": file,
            "plugin": self.user_agent,
            "project": document.project_name,
            "project_root_count": count_slashes_in_path(folder),
        }


def parse_today(body: Any, hide_categories: bool = False) -> TodaySummary:
    """Parse a statusbar/today response body."""
    data = body["data"]
    text = data["grand_total"]["text"] or ""
    categories = data.get("categories") or []
    if not hide_categories and len(categories) > 1:
        text = ", ".join(f"{c['text']} {c['name']}" for c in categories)
    return TodaySummary(
        text=text.strip(),
        has_team_features=bool(data.get("has_team_features")),
    )


def parse_file_experts(body: Any) -> TeamCacheEntry:
    """Pick "you" and the top other developer from a file experts response."""
    devs: List[dict] = body["data"] if isinstance(body, dict) else body
    if not devs:
        return TeamCacheEntry()

    current_user = next(
        (dev for dev in devs if dev["user"].get("is_current_user")), None
    )
    top_dev: Optional[dict] = devs[0]
    if top_dev["user"].get("is_current_user"):
        top_dev = devs[1] if len(devs) > 1 else None

    return TeamCacheEntry(
        you=parse_developer(current_user), other=parse_developer(top_dev)
    )


class HttpTransport(Transport):
    """HTTP client for the CodePulse api."""

    name = "http"

    def __init__(
        self,
        api_url: str,
        api_key: str,
        user_agent: str,
        logger: Optional[PluginLogger] = None,
        hide_categories: bool = False,
        timeout: Tuple[float, float] = (5, 15),
        get_api_key: Optional[Callable[[], str]] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.get_api_key = get_api_key
        self.user_agent = user_agent
        self.logger = logger or PluginLogger()
        self.hide_categories = hide_categories
        self.timeout = timeout
        self.payload_builder = HeartbeatPayloadBuilder(user_agent)

    def diagnostics_hint(self) -> str:
        return "plugin log"

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers including authentication if configured."""
        headers = {"Content-Type": "application/json", "User-Agent": self.user_agent}
        # the key can be entered or changed while the editor is running
        api_key = self.get_api_key() if self.get_api_key else self.api_key
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    def _request(self, method: str, path: str, payload: Optional[Dict] = None) -> Outcome:
        """Issue one request and classify the response status."""
        url = f"{self.api_url}{path}"
        try:
            if method == "GET":
                response = requests.get(
                    url, headers=self._get_headers(), timeout=self.timeout
                )
            else:
                response = requests.post(
                    url, json=payload, headers=self._get_headers(), timeout=self.timeout
                )
        except requests.exceptions.RequestException as e:
            self.logger.warn(f"API Error: {e}")
            return Outcome(DispatchStatus.UNKNOWN, message=str(e))

        outcome = Outcome(
            classify_http_status(response.status_code),
            code=response.status_code,
            raw=response.text or "",
        )
        if not outcome.ok:
            self.logger.warn(f"API Error {response.status_code}: {response.text}")
        return outcome

    def send_heartbeat(self, event: HeartbeatEvent) -> Outcome:
        payload = self.payload_builder.create_heartbeat_payload(event)
        self.logger.debug(f"Sending heartbeat: {payload}")
        return self._request("POST", "/users/current/heartbeats", payload)

    def fetch_today(self) -> Outcome:
        self.logger.debug("Fetching coding activity for Today from api.")
        outcome = self._request("GET", "/users/current/statusbar/today")
        if not outcome.ok:
            return outcome

        try:
            outcome.data = parse_today(json.loads(outcome.raw), self.hide_categories)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            outcome.status = DispatchStatus.PARSE_ERROR
            outcome.message = str(e)
        return outcome

    def fetch_file_experts(self, file: str, document: EditorDocument) -> Outcome:
        payload = self.payload_builder.create_file_experts_payload(file, document)
        if payload is None:
            self.logger.debug(f"Skipping devs lookup for {file}, not in a project.")
            return Outcome(DispatchStatus.ACCEPTED)

        self.logger.debug("Fetching devs for currently focused file from api.")
        outcome = self._request("POST", "/users/current/file_experts", payload)
        if not outcome.ok:
            return outcome

        try:
            outcome.data = parse_file_experts(json.loads(outcome.raw))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            outcome.status = DispatchStatus.PARSE_ERROR
            outcome.message = str(e)
        return outcome
