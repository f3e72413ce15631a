"""Tests for structured logging and secret redaction."""

from __future__ import annotations

import pytest

from prlabeler.logging import redact_secrets


class TestRedactSecrets:
    """Tests for secret redaction."""

    @pytest.mark.parametrize(
        "secret",
        [
            "ghp_" + "a" * 36,
            "ghs_" + "B1" * 20,
            "github_pat_" + "x" * 30,
        ],
    )
    def test_github_tokens(self, secret: str) -> None:
        result = redact_secrets(f"using {secret} for auth")

        assert secret not in result
        assert "[REDACTED_GITHUB_TOKEN]" in result

    def test_authorization_header(self) -> None:
        result = redact_secrets("Authorization: Bearer abc.def-ghi")

        assert "abc.def-ghi" not in result

    def test_token_assignment(self) -> None:
        assert redact_secrets("token=abcdefghijklmnopqrstuvwxyz") == "token=[REDACTED]"

    def test_nested_structures(self) -> None:
        token = "ghp_" + "z" * 40
        event = {"event": "labels_posted", "headers": [f"token {token}"], "count": 2}

        result = redact_secrets(event)

        assert token not in str(result)
        assert result["event"] == "labels_posted"
        assert result["count"] == 2

    def test_label_names_untouched(self) -> None:
        labels = ["bug", "needs-review", "create-if-missing"]

        assert redact_secrets(labels) == labels
