"""
Authentication helpers for the REST client.

    - basic: Basic ``Authorization`` header value
    - ntlm: httpx auth flow for NTLM challenges
    - kerberos: SPNEGO ``Negotiate`` header supplier
"""

from .basic import basic_authorization
from .kerberos import KerberosAuthenticator
from .ntlm import NTLMAuth

__all__ = [
    "KerberosAuthenticator",
    "NTLMAuth",
    "basic_authorization",
]
