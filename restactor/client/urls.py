"""Request URL construction."""

from __future__ import annotations

from typing import Any

from ..exceptions import ConfigurationError


ABSOLUTE_URL_PREFIXES = ("http://", "https://")


def format_path(template: str, *params: Any) -> str:
    """
    Substitute positional ``{}`` placeholders in a path template.

    Examples:
        >>> format_path("/api/users/{}/orders/{}", 42, "a1")
        '/api/users/42/orders/a1'
        >>> format_path("/api/users")
        '/api/users'

    Raises:
        ConfigurationError: If the placeholders do not match ``params``
    """
    if not params:
        return template
    try:
        return template.format(*params)
    except (IndexError, KeyError, ValueError) as e:
        raise ConfigurationError(
            f"Cannot format path '{template}' with {len(params)} parameter(s): {e!r}"
        ) from e


def complete_url(base_url: str, path: str) -> str:
    """Absolute ``path`` is used as-is; anything else is appended to ``base_url``."""
    if path.startswith(ABSOLUTE_URL_PREFIXES):
        return path
    return f"{base_url}{path}"


__all__ = [
    "complete_url",
    "format_path",
]
