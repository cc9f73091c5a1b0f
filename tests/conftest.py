"""Pytest configuration and fixtures."""

import shutil
import tempfile

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    temp_path = tempfile.mkdtemp()
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def sample_today_response():
    """Sample statusbar/today response body."""
    return {
        "data": {
            "grand_total": {"text": "3 hrs 12 mins", "total_seconds": 11520},
            "categories": [
                {"name": "Coding", "text": "2 hrs 40 mins"},
                {"name": "Debugging", "text": "32 mins"},
            ],
            "has_team_features": True,
        }
    }


@pytest.fixture
def sample_file_experts_response():
    """Sample file_experts response body."""
    return {
        "data": [
            {
                "user": {"is_current_user": False, "name": "ana", "long_name": "Ana Lima"},
                "total": {"text": "4 hrs 2 mins"},
            },
            {
                "user": {"is_current_user": True, "name": "me", "long_name": "Me Myself"},
                "total": {"text": "1 hr 1 min"},
            },
        ]
    }

