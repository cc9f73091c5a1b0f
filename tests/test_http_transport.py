"""Tests for http_transport module functionality."""

import json
import unittest
from unittest.mock import Mock, patch

import pytest
import requests

from codepulse.http_transport import (
    HeartbeatPayloadBuilder,
    HttpTransport,
    parse_file_experts,
    parse_today,
)
from codepulse.logger import LogLevel, PluginLogger
from codepulse.models import Category, DispatchStatus, HeartbeatEvent
from fakes import VALID_API_KEY, make_document

USER_AGENT = "vscode/1.90.0 codepulse/1.2.0"


def response(status_code, body=None):
    mock_response = Mock()
    mock_response.status_code = status_code
    mock_response.text = json.dumps(body) if body is not None else ""
    return mock_response


class TestHeartbeatPayloadBuilder(unittest.TestCase):
    """Test cases for HeartbeatPayloadBuilder class."""

    def setUp(self):
        """Set up test fixtures."""
        self.builder = HeartbeatPayloadBuilder(USER_AGENT)

    def test_create_heartbeat_payload(self):
        """Test the snake_case heartbeat body."""
        event = HeartbeatEvent(
            file_path="/home/u/p/a.go",
            timestamp=1000.25,
            cursor_line=5,
            cursor_column=3,
            total_lines=120,
            is_write=True,
            category=Category.DEBUGGING,
            project_name="p",
            project_root_path="/home/u/p",
            language="go",
        )

        payload = self.builder.create_heartbeat_payload(event)

        self.assertEqual(
            payload,
            {
                "type": "file",
                "entity": "/home/u/p/a.go",
                "time": 1000.25,
                "plugin": USER_AGENT,
                "lineno": "5",
                "cursorpos": "3",
                "lines": "120",
                "is_write": True,
                "project": "p",
                "language": "go",
                "project_root_count": 4,
                "category": "debugging",
            },
        )

    def test_payload_leaves_out_empty_fields(self):
        """Test that optional fields are only sent when known."""
        event = HeartbeatEvent("/tmp/x.txt", 1000.0, 1, 1, 1)

        payload = self.builder.create_heartbeat_payload(event)

        for key in ("project", "language", "project_root_count", "category"):
            self.assertNotIn(key, payload)
        self.assertFalse(payload["is_write"])

    def test_root_count_requires_file_inside_folder(self):
        """Test that a file outside the project folder gets no root count."""
        event = HeartbeatEvent(
            "/elsewhere/a.go", 1000.0, 1, 1, 1, project_root_path="/home/u/p"
        )
        payload = self.builder.create_heartbeat_payload(event)
        self.assertNotIn("project_root_count", payload)

    def test_file_experts_payload(self):
        """Test the file experts body."""
        document = make_document("/p/src/a.go")
        payload = self.builder.create_file_experts_payload("/p/src/a.go", document)

        self.assertEqual(payload["entity"], "/p/src/a.go")
        self.assertEqual(payload["project"], "p")
        self.assertEqual(payload["project_root_count"], 2)

    def test_file_experts_payload_needs_project(self):
        """Test that no body is built outside a project."""
        document = make_document("/p/a.go", project_name="")
        self.assertIsNone(self.builder.create_file_experts_payload("/p/a.go", document))

        document = make_document("/q/a.go")
        self.assertIsNone(self.builder.create_file_experts_payload("/q/a.go", document))


class TestHttpTransport(unittest.TestCase):
    """Test cases for HttpTransport class."""

    def setUp(self):
        """Set up test fixtures."""
        self.transport = HttpTransport(
            api_url="https://api.example.test/api/v1/",
            api_key=VALID_API_KEY,
            user_agent=USER_AGENT,
            logger=PluginLogger(LogLevel.ERROR),
        )
        self.event = HeartbeatEvent("/p/a.go", 1000.0, 5, 3, 120, language="go")

    @patch("requests.post")
    def test_send_heartbeat_request(self, mock_post):
        """Test url, headers, body and timeout of a heartbeat."""
        mock_post.return_value = response(201, {"data": {}})

        outcome = self.transport.send_heartbeat(self.event)

        self.assertEqual(outcome.status, DispatchStatus.ACCEPTED)
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], "https://api.example.test/api/v1/users/current/heartbeats")
        self.assertEqual(kwargs["headers"]["Authorization"], f"Bearer {VALID_API_KEY}")
        self.assertEqual(kwargs["headers"]["User-Agent"], USER_AGENT)
        self.assertEqual(kwargs["json"]["language"], "go")
        self.assertEqual(kwargs["timeout"], (5, 15))

    @patch("requests.post")
    def test_status_taxonomy(self, mock_post):
        """Test every documented status code."""
        cases = {
            200: DispatchStatus.ACCEPTED,
            201: DispatchStatus.ACCEPTED,
            202: DispatchStatus.ACCEPTED,
            401: DispatchStatus.AUTH_ERROR,
            400: DispatchStatus.UNKNOWN,
            429: DispatchStatus.UNKNOWN,
            500: DispatchStatus.UNKNOWN,
        }
        for code, expected in cases.items():
            mock_post.return_value = response(code, {"error": "x"})
            outcome = self.transport.send_heartbeat(self.event)
            self.assertEqual(outcome.status, expected, code)
            self.assertEqual(outcome.code, code)

    @patch("requests.post")
    def test_network_error(self, mock_post):
        """Test that connection errors are classified, not raised."""
        mock_post.side_effect = requests.exceptions.ConnectionError("Network error")

        outcome = self.transport.send_heartbeat(self.event)

        self.assertEqual(outcome.status, DispatchStatus.UNKNOWN)
        self.assertIsNone(outcome.code)
        self.assertIn("Network error", outcome.message)

    @patch("requests.post")
    def test_read_timeout(self, mock_post):
        """Test that a read timeout is classified, not raised."""
        mock_post.side_effect = requests.exceptions.ReadTimeout("Read timeout")

        outcome = self.transport.send_heartbeat(self.event)

        self.assertEqual(outcome.status, DispatchStatus.UNKNOWN)

    @patch("requests.get")
    def test_fetch_today(self, mock_get):
        """Test the today query."""
        mock_get.return_value = response(
            200,
            {
                "data": {
                    "grand_total": {"text": "3 hrs 12 mins"},
                    "categories": [{"name": "Coding", "text": "3 hrs 12 mins"}],
                    "has_team_features": True,
                }
            },
        )

        outcome = self.transport.fetch_today()

        self.assertEqual(
            mock_get.call_args[0][0],
            "https://api.example.test/api/v1/users/current/statusbar/today",
        )
        self.assertEqual(outcome.data.text, "3 hrs 12 mins")
        self.assertTrue(outcome.data.has_team_features)

    @patch("requests.get")
    def test_fetch_today_malformed(self, mock_get):
        """Test that an unexpected body is a parse error."""
        mock_get.return_value = response(200, {"data": {}})

        outcome = self.transport.fetch_today()

        self.assertEqual(outcome.status, DispatchStatus.PARSE_ERROR)

    @patch("requests.get")
    def test_fetch_today_unauthorized(self, mock_get):
        """Test that 401 on the today query is an auth error."""
        mock_get.return_value = response(401, {"error": "Unauthorized"})

        outcome = self.transport.fetch_today()

        self.assertEqual(outcome.status, DispatchStatus.AUTH_ERROR)
        self.assertIsNone(outcome.data)

    @patch("requests.post")
    def test_fetch_file_experts(self, mock_post):
        """Test the file experts query."""
        mock_post.return_value = response(
            200,
            {
                "data": [
                    {
                        "user": {"is_current_user": True, "name": "me", "long_name": "Me"},
                        "total": {"text": "2 hrs"},
                    },
                    {
                        "user": {"is_current_user": False, "name": "ana", "long_name": "Ana Lima"},
                        "total": {"text": "1 hr"},
                    },
                ]
            },
        )

        outcome = self.transport.fetch_file_experts("/p/a.go", make_document())

        self.assertEqual(
            mock_post.call_args[0][0],
            "https://api.example.test/api/v1/users/current/file_experts",
        )
        self.assertEqual(outcome.data.you.total_text, "2 hrs")
        self.assertEqual(outcome.data.other.display_name, "ana")

    @patch("requests.post")
    def test_fetch_file_experts_outside_project(self, mock_post):
        """Test that no request is made for a file outside the project."""
        outcome = self.transport.fetch_file_experts(
            "/q/a.go", make_document("/q/a.go")
        )

        mock_post.assert_not_called()
        self.assertEqual(outcome.status, DispatchStatus.ACCEPTED)
        self.assertIsNone(outcome.data)


class TestParseFileExperts(unittest.TestCase):
    """Test cases for choosing "you" and "other"."""

    def dev(self, name, current=False, text="1 hr"):
        return {
            "user": {"is_current_user": current, "name": name, "long_name": name.title()},
            "total": {"text": text},
        }

    def test_top_dev_is_other(self):
        """Test that the first non-current entry is "other"."""
        entry = parse_file_experts([self.dev("ana"), self.dev("me", current=True)])
        self.assertEqual(entry.other.display_name, "ana")
        self.assertEqual(entry.you.display_name, "me")

    def test_current_user_on_top_falls_through(self):
        """Test that the second entry is used when the top one is you."""
        entry = parse_file_experts([self.dev("me", current=True), self.dev("bo")])
        self.assertEqual(entry.other.display_name, "bo")

    def test_only_current_user(self):
        """Test that "other" is empty when you are the only developer."""
        entry = parse_file_experts([self.dev("me", current=True)])
        self.assertIsNone(entry.other)
        self.assertEqual(entry.you.display_name, "me")

    def test_current_user_absent(self):
        """Test that "you" is empty when you never opened the file."""
        entry = parse_file_experts({"data": [self.dev("ana"), self.dev("bo")]})
        self.assertIsNone(entry.you)
        self.assertEqual(entry.other.display_name, "ana")

    def test_empty_list(self):
        """Test that an empty list is "fetched, nobody"."""
        entry = parse_file_experts({"data": []})
        self.assertIsNone(entry.you)
        self.assertIsNone(entry.other)


def test_parse_today_joins_categories(sample_today_response):
    """Test that multiple categories replace the grand total."""
    summary = parse_today(sample_today_response)
    assert summary.text == "2 hrs 40 mins Coding, 32 mins Debugging"
    assert summary.has_team_features is True


def test_parse_today_hide_categories(sample_today_response):
    """Test that hiding categories keeps the grand total."""
    summary = parse_today(sample_today_response, hide_categories=True)
    assert summary.text == "3 hrs 12 mins"


def test_parse_file_experts_sample(sample_file_experts_response):
    """Test the sample response from the fixtures."""
    entry = parse_file_experts(sample_file_experts_response)
    assert entry.you.total_text == "1 hr 1 min"
    assert entry.other.long_name == "Ana Lima"


def test_parse_today_rejects_missing_data():
    """Test that a body without data raises for the caller to classify."""
    with pytest.raises(KeyError):
        parse_today({})


if __name__ == "__main__":
    unittest.main()
