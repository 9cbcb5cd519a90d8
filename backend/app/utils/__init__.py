"""Utility functions and helpers."""

from app.utils.datetime_utils import to_api_timezone, utc_now

__all__ = [
    "to_api_timezone",
    "utc_now",
]
