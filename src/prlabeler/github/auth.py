"""GitHub token lookup and masking."""

from __future__ import annotations

import os

# Checked in order; INPUT_TOKEN is how GitHub Actions passes a `token` input
TOKEN_ENV_VARS: tuple[str, ...] = ("GITHUB_TOKEN", "INPUT_TOKEN")


class AuthenticationError(Exception):
    """Raised when GitHub authentication fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        """Initialize authentication error.

        Args:
            message: Error description.
            status_code: HTTP status code if from API response.
        """
        super().__init__(message)
        self.status_code = status_code


def get_github_token() -> str:
    """Get GitHub token from environment.

    Returns:
        GitHub token.

    Raises:
        AuthenticationError: If neither GITHUB_TOKEN nor INPUT_TOKEN is set.
    """
    for name in TOKEN_ENV_VARS:
        token = os.environ.get(name, "").strip()
        if token:
            return token
    raise AuthenticationError(
        "GITHUB_TOKEN environment variable is not set. "
        "Pass --token or set it to a token with pull request write access."
    )


def mask_token(token: str) -> str:
    """Mask a token for safe logging.

    Args:
        token: Token to mask.

    Returns:
        Masked token showing first 4 and last 4 characters.
    """
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-4:]}"
