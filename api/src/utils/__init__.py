"""Utility modules for StudyOverflow API."""

from src.utils.datetimes import ensure_utc, utc_now


__all__ = ["ensure_utc", "utc_now"]
