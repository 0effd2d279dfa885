"""Basic authentication header."""

from __future__ import annotations

import base64


def basic_authorization(user: str, secret: str) -> str:
    """
    Build the Basic ``Authorization`` header value.

    Example:
        >>> basic_authorization("User", "Password")
        'Basic VXNlcjpQYXNzd29yZA=='
    """
    credentials = f"{user}:{secret}".encode("utf-8")
    return "Basic " + base64.b64encode(credentials).decode("ascii")


__all__ = [
    "basic_authorization",
]
