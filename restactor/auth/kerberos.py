"""
Kerberos (SPNEGO) authorization header.

Tokens are produced by pyspnego from the credentials in the Kerberos ticket
cache (populated by ``kinit`` or an equivalent). A new security context is
created for every header so an expired ticket is picked up again from the
cache.

Supported options:
    principal: Client principal, defaults to the ticket cache owner
    password: Password for the principal, if no ticket is cached
    service: Service class of the target principal (default "HTTP")
"""

from __future__ import annotations

import base64
from typing import Mapping, Optional

import spnego
from loguru import logger
from spnego.exceptions import SpnegoError

from ..exceptions import AuthenticationError


DEFAULT_SERVICE = "HTTP"


class KerberosAuthenticator:
    """Builds ``Negotiate`` Authorization header values for one client."""

    def __init__(self, options: Optional[Mapping[str, str]] = None) -> None:
        self.options = dict(options or {})

    def service_principal(self, hostname: str) -> str:
        return f"{self.options.get('service', DEFAULT_SERVICE)}@{hostname}"

    def build_token(self, hostname: str) -> bytes:
        """
        Create the initial security context token for ``hostname``.

        Raises:
            AuthenticationError: If no token could be produced
        """
        try:
            context = spnego.client(
                self.options.get("principal"),
                self.options.get("password"),
                hostname=hostname,
                service=self.options.get("service", DEFAULT_SERVICE),
                protocol="kerberos",
            )
            token = context.step()
        except SpnegoError as e:
            raise AuthenticationError(f"Kerberos authentication failed: {e}") from e

        if not token:
            raise AuthenticationError(
                f"Kerberos authentication failed: no token for {self.service_principal(hostname)}"
            )
        logger.debug(f"Kerberos token created for {self.service_principal(hostname)}")
        return token

    def build_authorization_header(self, hostname: str) -> str:
        return "Negotiate " + base64.b64encode(self.build_token(hostname)).decode("ascii")


__all__ = [
    "KerberosAuthenticator",
]
