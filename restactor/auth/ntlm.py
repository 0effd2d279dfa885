"""
================================================================================
NTLM Authentication
================================================================================

httpx authentication flow for servers answering with NTLM challenges:

    1. request                -> 401, WWW-Authenticate: Negotiate / NTLM
    2. NTLM <negotiate>       -> 401, WWW-Authenticate: NTLM <challenge>
    3. NTLM <authenticate>    -> final response

Proxy challenges (407 / Proxy-Authenticate) follow the same exchange.
NTLM messages are produced by pyspnego.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import base64
from typing import Generator, List, Optional

import httpx
import spnego
from loguru import logger
from spnego.exceptions import SpnegoError

from ..exceptions import AuthenticationError


NTLM_SCHEME = "NTLM"
NEGOTIATE_SCHEME = "Negotiate"


class NTLMAuth(httpx.Auth):
    """
    NTLM challenge/response authentication.

    Args:
        user: Account name
        secret: Account password
        domain: Optional Windows domain, sent as ``DOMAIN\\user``
    """

    requires_response_body = True

    def __init__(self, user: str, secret: str, domain: str = "") -> None:
        self.user = user
        self.secret = secret
        self.domain = domain

    @property
    def username(self) -> str:
        return f"{self.domain}\\{self.user}" if self.domain else self.user

    def _new_context(self, request: httpx.Request):
        return spnego.client(
            self.username,
            self.secret,
            hostname=request.url.host,
            service="HTTP",
            protocol="ntlm",
        )

    @staticmethod
    def _header_names(response: httpx.Response):
        if response.status_code == 407:
            return "Proxy-Authenticate", "Proxy-Authorization"
        return "WWW-Authenticate", "Authorization"

    @staticmethod
    def _parse_challenges(challenges: List[str]):
        negotiate = False
        ntlm = False
        ntlm_value: Optional[str] = None
        for challenge in challenges:
            challenge = challenge.strip()
            if challenge.lower() == NEGOTIATE_SCHEME.lower():
                negotiate = True
            if challenge.lower() == NTLM_SCHEME.lower():
                ntlm = True
            if challenge.startswith(NTLM_SCHEME + " "):
                ntlm_value = challenge[len(NTLM_SCHEME) + 1:].strip()
        return negotiate and ntlm, ntlm_value

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        response = yield request
        context = None
        authenticated = False

        while response.status_code in (401, 407) and not authenticated:
            challenge_header, authorization_header = self._header_names(response)
            challenges = response.headers.get_list(challenge_header, split_commas=True)
            if not challenges:
                raise AuthenticationError(
                    f"Didn't get {challenge_header} - doesn't look like NTLM auth is used!"
                )

            start, challenge = self._parse_challenges(challenges)
            try:
                if challenge is not None:
                    if context is None:
                        context = self._new_context(request)
                        context.step()
                    token = context.step(base64.b64decode(challenge))
                    authenticated = True
                elif start and context is None:
                    context = self._new_context(request)
                    token = context.step()
                elif start:
                    # negotiate message rejected, hand the 401 to the caller
                    return
                else:
                    raise AuthenticationError(f"Unknown NTLM auth type: {challenges}")
            except (SpnegoError, ValueError) as e:
                raise AuthenticationError(f"NTLM Auth: message generation failed: {e}") from e

            logger.debug(
                f"NTLM {'authenticate' if authenticated else 'negotiate'} message "
                f"for {request.url.host}"
            )
            request.headers[authorization_header] = (
                f"{NTLM_SCHEME} {base64.b64encode(token).decode('ascii')}"
            )
            response = yield request


__all__ = [
    "NTLMAuth",
]
