"""
Verification of identity-provider ID tokens through the firebase-admin SDK.

The SDK fetches and caches the provider's signing certificates and checks
signature, audience, issuer and token times; this module only maps its
outcome onto the API's errors.
"""

import logging
from typing import Any, Dict, Optional, Protocol

import firebase_admin
from firebase_admin import auth, credentials

from errors import Internal, Unauthenticated

logger = logging.getLogger(__name__)


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> str: ...


DEFAULT_APP_NAME = "[DEFAULT]"


def init_firebase_app(service_account: Dict[str, Any], name: str = DEFAULT_APP_NAME):
    """Initialize the named SDK app once; later calls return the existing one."""
    try:
        return firebase_admin.get_app(name)
    except ValueError:
        return firebase_admin.initialize_app(credentials.Certificate(service_account), name=name)


class FirebaseTokenVerifier:
    def __init__(self, app):
        self.app = app

    @classmethod
    def from_service_account(cls, service_account: Dict[str, Any]) -> "FirebaseTokenVerifier":
        return cls(init_firebase_app(service_account))

    def verify(self, token: str) -> str:
        """Return the principal (``uid``) of a valid ID token."""
        try:
            claims = auth.verify_id_token(token, app=self.app)
        except auth.CertificateFetchError as e:
            logger.error("Could not fetch token signing certificates: %s", e)
            raise Internal("Internal server error")
        except (auth.InvalidIdTokenError, ValueError) as e:
            logger.info("Rejected ID token: %s", e)
            raise Unauthenticated("Unauthorized: invalid token")
        return claims["uid"]


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None
