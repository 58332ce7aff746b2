"""
Pytest configuration and fixtures.

Provides an in-memory stand-in for the unit-of-work so services can be
exercised without PostgreSQL.
"""

import contextlib
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


def make_profile_row(user_id, **fields):
    """Profile stand-in exposing every attribute profile_to_dict() reads."""
    defaults = {
        'user_id': user_id,
        'gender': None,
        'date_of_birth': None,
        'year_of_study': None,
        'field_of_study': None,
        'college_tier': None,
        'height': None,
        'body_type': None,
        'skin_tone': None,
        'personality_traits': None,
        'personality_type': None,
        'values': None,
        'mindset': None,
        'relationship_goals': None,
        'interests': None,
        'lifestyle': None,
        'bio': None,
        'is_active': True,
        'reports_count': 0,
    }
    defaults.update(fields)
    return SimpleNamespace(**defaults)


def make_uow(repo):
    """Unit-of-work factory yielding the same mock repository every time."""
    @contextlib.contextmanager
    def factory():
        yield repo
    return factory


@pytest.fixture
def mock_repo():
    repo = MagicMock()
    repo.profiles.get_by_user_id.return_value = None
    repo.profiles.get_partner_preference.return_value = None
    repo.profiles.get_blocked_user_ids.return_value = []
    repo.profiles.get_candidate_pool.return_value = []
    repo.qcs.get_total_scores.return_value = {}
    repo.ai_failures.get_state.return_value = None
    return repo


@pytest.fixture
def uow_factory(mock_repo):
    return make_uow(mock_repo)
