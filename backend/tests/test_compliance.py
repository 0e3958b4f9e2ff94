"""Compliance evaluation — verdict per regulation type."""
import pytest

from app.services.compliance import evaluate
from app.services.errors import UnsupportedRegulationType


@pytest.mark.parametrize("value, expected", [
    ("true", True),
    ("false", False),
    ("True", False),
    ("TRUE", False),
    (" true", False),
    ("1", False),
    ("", False),
    (None, False),
])
def test_boolean(value, expected):
    assert evaluate("Boolean", None, value) is expected


def test_boolean_ignores_config():
    assert evaluate("Boolean", "whatever", "true") is True


@pytest.mark.parametrize("config, value, expected", [
    ("90", "95", True),
    ("90", "90", True),
    ("90", "89.99", False),
    ("0.5", "1e0", True),
    ("-10", "-10.5", False),
    ("90", " 95 ", True),
    ("90", "abc", False),
    ("90", "", False),
    ("90", None, False),
    (None, "95", False),
    ("abc", "95", False),
    # Only plain decimals count as numbers
    ("90", "Infinity", False),
    ("90", "0x100", False),
    ("90", "1,5e2", False),
    ("Infinity", "95", False),
])
def test_threshold(config, value, expected):
    assert evaluate("Threshold", config, value) is expected


def test_threshold_accepts_numeric_value():
    assert evaluate("Threshold", "80", 80) is True


@pytest.mark.parametrize("value", ["<testsuite/>", "", None])
def test_junit_always_passes(value):
    assert evaluate("JUnit", "95", value) is True


def test_unknown_type_raises():
    with pytest.raises(UnsupportedRegulationType) as exc:
        evaluate("Regex", "^a$", "a")
    assert exc.value.message == "Unsupported regulation type: Regex"
    assert exc.value.status_code == 500


def test_type_names_are_case_sensitive():
    with pytest.raises(UnsupportedRegulationType):
        evaluate("boolean", None, "true")
