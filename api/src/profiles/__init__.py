"""Author profile directory (read-only)."""

from .models import PROFILES_TABLES_CQL, UserProfile
from .service import ProfileDirectory


__all__ = ["PROFILES_TABLES_CQL", "ProfileDirectory", "UserProfile"]
