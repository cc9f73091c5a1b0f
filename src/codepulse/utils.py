#!/usr/bin/env python3
"""
Helpers shared by the engine and both transports.
"""

import re
import shlex
import threading
from typing import Callable, List
from urllib.parse import urlparse

from .models import EditorDocument

REMOTE_SCHEMES = ("vscode-remote",)
PULL_REQUEST_SCHEMES = ("pr", "review", "vscode-pull-request-github")

API_KEY_PATTERN = re.compile(
    r"^(cp_)?[0-9A-F]{8}-[0-9A-F]{4}-4[0-9A-F]{3}-[89AB][0-9A-F]{3}-[0-9A-F]{12}$",
    re.IGNORECASE,
)


def _scheme(uri: str) -> str:
    return urlparse(uri).scheme if uri else ""


def is_remote_uri(uri: str) -> bool:
    return _scheme(uri) in REMOTE_SCHEMES


def is_pull_request(uri: str) -> bool:
    return _scheme(uri) in PULL_REQUEST_SCHEMES


def entity_for(document: EditorDocument) -> str:
    """Get the heartbeat entity for a document.

    Remote documents are reported as ``authority + path`` so the backend can
    tell hosts apart; ``ssh-remote+host`` becomes ``ssh://host``.
    """
    if not is_remote_uri(document.uri):
        return document.file_name

    parsed = urlparse(document.uri)
    entity = f"{parsed.netloc}{parsed.path}"
    # TODO: map dev-container, attached-container, wsl and codespaces authorities
    return entity.replace("ssh-remote+", "ssh://")


def api_key_invalid(key: str) -> str:
    """Return an error message for a bad api key, or an empty string."""
    if not key:
        return "Invalid api key... please try again."
    if not API_KEY_PATTERN.match(key):
        return "Invalid api key... check your CodePulse account settings for your key."
    return ""


def count_slashes_in_path(path: str) -> int:
    """Count path separators in a folder, including a trailing one.

    The backend uses the count to split the project root off an entity.
    """
    if not path:
        return 0

    windows_net_drive = path.startswith("\\\\")

    path = re.sub(r"[\\/]+", "/", path)

    if windows_net_drive:
        path = "\\\\" + path[1:]

    if not path.endswith("/"):
        path = path + "/"

    return path.count("/")


def build_user_agent(editor_name: str, editor_version: str, plugin_version: str) -> str:
    return f"{editor_name}/{editor_version} codepulse/{plugin_version}"


def format_arguments(binary: str, args: List[str]) -> str:
    """Format a command line for the debug log, hiding the api key."""
    clean = list(args)
    if "--key" in clean:
        index = clean.index("--key") + 1
        if index < len(clean):
            clean[index] = obfuscate_key(clean[index])
    return shlex.join([binary] + clean)


def obfuscate_key(key: str) -> str:
    if len(key) <= 4:
        return "XXXX"
    return "XXXXXXXX-XXXX-XXXX-XXXX-XXXXXXXX" + key[-4:]


def run_in_thread(target: Callable[[], None]) -> None:
    """Run an outbound call on a detached daemon thread."""
    thread = threading.Thread(target=target, daemon=True)
    thread.start()
