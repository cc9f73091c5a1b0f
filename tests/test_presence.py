"""Tests for presence module functionality."""

import unittest

from codepulse.logger import LogLevel, PluginLogger
from codepulse.models import DeveloperTime, DispatchStatus, Outcome, TeamCacheEntry
from codepulse.presence import TeamPresenceCache
from codepulse.status import StatusBar
from fakes import DeferredRunner, FakeTransport, make_document

ENTRY = TeamCacheEntry(
    you=DeveloperTime("20 mins", "me", "Me Myself"),
    other=DeveloperTime("3 hrs", "ana", "Ana Lima"),
)


class TestTeamPresenceCache(unittest.TestCase):
    """Test cases for TeamPresenceCache class."""

    def setUp(self):
        """Set up test fixtures."""
        self.transport = FakeTransport(
            experts_outcome=Outcome(DispatchStatus.ACCEPTED, code=0, data=ENTRY)
        )
        self.status_bar = StatusBar()
        self.runner = DeferredRunner()
        self.team_available = True
        self.cache = TeamPresenceCache(
            self.transport,
            self.status_bar,
            is_team_available=lambda: self.team_available,
            logger=PluginLogger(LogLevel.ERROR + 1),
            runner=self.runner,
        )
        self.doc_a = make_document("/p/a.go")
        self.doc_b = make_document("/p/b.go")

    def test_miss_fetches_and_shows(self):
        """Test a first lookup."""
        self.assertIsNone(self.cache.focus("/p/a.go", self.doc_a))
        self.runner.run_all()

        self.assertEqual(self.transport.experts_calls, ["/p/a.go"])
        self.assertEqual(self.status_bar.team_you_text, "You: 20 mins")
        self.assertEqual(self.status_bar.team_other_text, "ana: 3 hrs")
        self.assertEqual(
            self.status_bar.team_other_tooltip,
            "Ana Lima's total time spent in this file",
        )
        self.assertEqual(self.cache.get("/p/a.go"), ENTRY)

    def test_hit_is_synchronous(self):
        """Test that a cached file is served without a fetch."""
        self.cache.focus("/p/a.go", self.doc_a)
        self.runner.run_all()
        self.cache.focus("/p/b.go", self.doc_b)
        self.runner.run_all()

        entry = self.cache.focus("/p/a.go", self.doc_a)

        self.assertEqual(entry, ENTRY)
        self.assertEqual(self.runner.pending, [])
        self.assertEqual(self.transport.experts_calls, ["/p/a.go", "/p/b.go"])
        self.assertEqual(self.status_bar.team_you_text, "You: 20 mins")

    def test_empty_entry_is_a_hit(self):
        """Test that "fetched, nobody" is not refetched."""
        self.transport.experts_outcome = Outcome(
            DispatchStatus.ACCEPTED, code=0, data=TeamCacheEntry()
        )
        self.cache.focus("/p/a.go", self.doc_a)
        self.runner.run_all()

        entry = self.cache.lookup("/p/a.go", self.doc_a)

        self.assertEqual(entry, TeamCacheEntry())
        self.assertEqual(self.transport.experts_calls, ["/p/a.go"])
        self.assertEqual(self.status_bar.team_you_text, "")
        self.assertEqual(self.status_bar.team_other_text, "")

    def test_late_response_for_unfocused_file_is_dropped(self):
        """Test that a slow answer for A does not overwrite B."""
        self.cache.focus("/p/a.go", self.doc_a)
        self.transport.experts_outcome = Outcome(
            DispatchStatus.ACCEPTED,
            code=0,
            data=TeamCacheEntry(other=DeveloperTime("5 mins", "bo", "Bo")),
        )
        self.cache.focus("/p/b.go", self.doc_b)

        # b.go resolves first, then the slow a.go answer arrives
        self.runner.pending.reverse()
        self.runner.run_all()

        self.assertEqual(self.status_bar.team_other_text, "bo: 5 mins")
        self.assertEqual(self.status_bar.team_you_text, "")
        self.assertIsNotNone(self.cache.get("/p/a.go"))

    def test_stale_apply_is_cached_but_not_shown(self):
        """Test apply() directly with a non-focused file."""
        self.cache.focused_file = "/p/b.go"
        self.status_bar.update_team_other("bo: 5 mins")

        self.cache.apply(
            "/p/a.go", Outcome(DispatchStatus.ACCEPTED, code=0, data=ENTRY)
        )

        self.assertEqual(self.status_bar.team_other_text, "bo: 5 mins")
        self.assertEqual(self.cache.get("/p/a.go"), ENTRY)

    def test_no_fetch_without_team_features(self):
        """Test the team features gate."""
        self.team_available = False

        self.cache.focus("/p/a.go", self.doc_a)

        self.assertEqual(self.runner.pending, [])
        self.assertEqual(self.cache.focused_file, "/p/a.go")

    def test_no_fetch_when_disabled(self):
        """Test the user setting gate."""
        self.cache.enabled = False

        self.assertIsNone(self.cache.lookup("/p/a.go", self.doc_a))
        self.assertEqual(self.runner.pending, [])

    def test_parse_error_is_not_cached(self):
        """Test that a malformed answer leaves the file unfetched."""
        self.transport.experts_outcome = Outcome(
            DispatchStatus.PARSE_ERROR, code=0, raw="{bad"
        )
        self.cache.focus("/p/a.go", self.doc_a)
        self.runner.run_all()

        self.assertIsNone(self.cache.get("/p/a.go"))

        self.cache.lookup("/p/a.go", self.doc_a)
        self.assertEqual(len(self.runner.pending), 1)

    def test_offline_is_not_cached(self):
        """Test that an offline answer changes nothing."""
        self.transport.experts_outcome = Outcome(DispatchStatus.OFFLINE, code=112)
        self.cache.focus("/p/a.go", self.doc_a)
        self.runner.run_all()

        self.assertIsNone(self.cache.get("/p/a.go"))

    def test_error_clears_focused_text(self):
        """Test that a failed lookup clears the team text."""
        self.status_bar.update_team_you("You: old")
        self.cache.focused_file = "/p/a.go"

        self.cache.apply("/p/a.go", Outcome(DispatchStatus.UNKNOWN, code=500))

        self.assertEqual(self.status_bar.team_you_text, "")
        self.assertIsNone(self.cache.get("/p/a.go"))

    def test_focus_clears_previous_text(self):
        """Test that moving focus clears the old file's presence."""
        self.status_bar.update_team_you("You: old")
        self.team_available = False

        self.cache.focus("/p/b.go", self.doc_b)

        self.assertEqual(self.status_bar.team_you_text, "")

    def test_clear(self):
        """Test that clear drops every entry."""
        self.cache.focus("/p/a.go", self.doc_a)
        self.runner.run_all()

        self.cache.clear()

        self.assertIsNone(self.cache.get("/p/a.go"))
        self.assertIsNone(self.cache.focused_file)


if __name__ == "__main__":
    unittest.main()
