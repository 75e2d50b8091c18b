"""Bearer token authentication.

Token issuance lives in the external auth service; this package validates
access tokens and exposes the caller's identity to routers.
"""

from .dependencies import CurrentUser, OptionalUser
from .schemas import AuthenticatedUser


__all__ = ["AuthenticatedUser", "CurrentUser", "OptionalUser"]
