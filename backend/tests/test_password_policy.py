"""Tests for the advisory password strength policy"""

import pytest

from resetdesk.engine import password_policy


@pytest.mark.parametrize("password", ["Str0ng!pass", "abcdefg1!", "12345678#"])
def test_strong_passwords(password):
    assert password_policy.is_strong(password)


@pytest.mark.parametrize("password", [
    "abc",            # short, no digit, no symbol
    "abcdefgh",       # no digit, no symbol
    "abcdefg1",       # no symbol
    "abcdefg!",       # no digit
    "ab1!",           # too short
    "abcdefg1-",      # '-' is not in the symbol set
])
def test_weak_passwords(password):
    assert not password_policy.is_strong(password)


def test_score_counts_each_criterion():
    assert password_policy.strength_score("") == 0
    assert password_policy.strength_score("abcdefgh") == 25
    assert password_policy.strength_score("Abcdefgh") == 50
    assert password_policy.strength_score("Abcdefg1") == 75
    assert password_policy.strength_score("Abcdefg1!") == 100


def test_evaluate_reports_checks():
    report = password_policy.evaluate("abc")
    assert report["strong"] is False
    assert report["score"] == 0
    assert report["checks"] == {
        "length": False,
        "uppercase": False,
        "digit": False,
        "symbol": False,
    }
