"""Tests for value and detail redaction"""

import pytest

from warden.logging.path_sanitizer import REDACTED_SENSITIVE_FILE
from warden.logging.redaction import (
    REDACTED_ALL_VALUES,
    REDACTED_KEY,
    REDACTED_SENSITIVE_VALUE,
    TRUNCATED_SUFFIX,
    SanitizeOptions,
    looks_like_sensitive_data,
    sanitize_details,
    sanitize_value,
)

REDACT_ALL = SanitizeOptions(redact_all_sensitive=True)


# ============ Scalars ============


@pytest.mark.parametrize("value", [None, 0, 42, 1.5, True, False])
def test_scalars_pass_through(value):
    assert sanitize_value(value) is value


def test_keyword_value_is_masked():
    assert sanitize_value("password123") == REDACTED_SENSITIVE_VALUE


def test_redact_all_masks_every_string():
    assert sanitize_value("password123", REDACT_ALL) == REDACTED_ALL_VALUES
    assert sanitize_value("hello", REDACT_ALL) == REDACTED_ALL_VALUES
    assert sanitize_value(7, REDACT_ALL) == 7


def test_long_string_is_truncated():
    assert sanitize_value("x" * 60) == "x" * 50 + TRUNCATED_SUFFIX


def test_short_string_unchanged():
    assert sanitize_value("status") == "status"


def test_digit_run_is_not_a_secret():
    assert looks_like_sensitive_data("1" * 40) is False
    assert sanitize_value("1" * 40) == "1" * 40


def test_mixed_class_token_is_a_secret():
    assert looks_like_sensitive_data("Abc123" * 6) is True
    assert sanitize_value("Abc123" * 6) == REDACTED_SENSITIVE_VALUE


def test_secret_length_window():
    assert looks_like_sensitive_data("Ab1" * 10) is False
    assert looks_like_sensitive_data("Ab1" * 100) is False


@pytest.mark.parametrize("value", ["Bearer abc", "AUTHORIZATION", "my_api-key", "private"])
def test_keywords(value):
    assert looks_like_sensitive_data(value) is True


def test_plain_word_is_not_sensitive():
    assert looks_like_sensitive_data("hello") is False


def test_path_values_use_path_sanitizer():
    assert sanitize_value("/home/alice/.ssh/id_rsa") == REDACTED_SENSITIVE_FILE
    assert sanitize_value("/tmp/build") == "/tmp/build"


# ============ Containers ============


def test_sequences_are_abstracted():
    assert sanitize_value([1, 2, 3]) == "[Array(3)]"
    assert sanitize_value(("password",)) == "[Array(1)]"


def test_mapping_lists_keys():
    assert sanitize_value({"a": 1, "b": 2}) == "[Object(2 keys: a, b)]"


def test_mapping_with_sensitive_key_hides_names():
    assert sanitize_value({"password": 1, "b": 2}) == "[Object(2 keys)]"


def test_mapping_shows_at_most_five_keys():
    value = {key: 0 for key in "abcdef"}
    assert sanitize_value(value) == "[Object(6 keys: a, b, c, d, e...)]"


def test_mapping_is_not_recursed():
    assert sanitize_value({"a": {"password": "hunter2"}}) == "[Object(1 keys: a)]"


def test_other_objects_show_type_name():
    assert sanitize_value(object()) == "[object]"


# ============ Details ============


def test_sensitive_keys_collapse():
    details = sanitize_details({"api_key": "x", "token": "y", "user": "bob"})
    assert details == {REDACTED_KEY: "y", "user": "bob"}


def test_details_values_are_sanitized():
    details = sanitize_details({"note": "password123", "count": 3})
    assert details == {"note": REDACTED_SENSITIVE_VALUE, "count": 3}


def test_details_honor_options():
    assert sanitize_details({"user": "bob"}, REDACT_ALL) == {"user": REDACTED_ALL_VALUES}
