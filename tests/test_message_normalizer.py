"""Tests for display-side normalization of inquiry messages."""

import pytest

from logici_client.services.message_normalizer import (
    CORRUPTED_MESSAGE,
    ENCODED_MESSAGE,
    NO_MESSAGE,
    SYSTEM_LOG_MESSAGE,
    UNDISPLAYABLE_MESSAGE,
    normalize_message,
)


class TestDiagnostics:
    @pytest.mark.parametrize("message", [None, ""])
    def test_empty(self, message) -> None:
        assert normalize_message(message) == NO_MESSAGE

    @pytest.mark.parametrize(
        "message",
        [
            '127.0.0.1 - - "GET /uploads/a.jpg HTTP/1.1" 200',
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
        ],
    )
    def test_request_logs(self, message) -> None:
        assert normalize_message(message) == SYSTEM_LOG_MESSAGE

    @pytest.mark.parametrize(
        "message",
        ["please call szdcfvxbgcnvhmtj", "asdf,qwer,zxcv,asdf,qwer,zxcv,asdf"],
    )
    def test_keyboard_mash(self, message) -> None:
        assert normalize_message(message) == CORRUPTED_MESSAGE

    def test_long_text_without_whitespace(self) -> None:
        assert normalize_message("Ab1" * 40) == ENCODED_MESSAGE

    def test_malformed_escape(self) -> None:
        assert normalize_message("Need 100% cold storage") == UNDISPLAYABLE_MESSAGE
        assert UNDISPLAYABLE_MESSAGE == "Unable to display message. Please contact customer directly."


class TestRecovery:
    def test_plain_short_message_unchanged(self) -> None:
        assert normalize_message("hello, world, this is fine") == "hello, world, this is fine"

    def test_url_encoded_message_is_decoded(self) -> None:
        assert normalize_message("Need+space+in+Pune%2C+urgently") == "Need space in Pune, urgently"

    def test_comma_dense_text_picks_first_meaningful_part(self) -> None:
        message = "undefined,xyzxyzxyzxyzxyzxyz,Looking for dry storage near Nashik,undefined,undefined"
        assert normalize_message(message) == "Looking for dry storage near Nashik"

    def test_long_message_is_truncated(self) -> None:
        message = "word " * 100
        result = normalize_message(message)
        assert result.endswith("...")
        assert len(result) == 303
