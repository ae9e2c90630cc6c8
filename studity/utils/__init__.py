"""Utility helpers for reusable functionality."""

from .datetime import (
    combine_in_app_timezone,
    ensure_app_naive_datetime,
    ensure_app_timezone,
    get_app_timezone,
    now_in_app_naive_datetime,
    now_in_app_timezone,
    parse_clock_time,
)

__all__ = [
    "combine_in_app_timezone",
    "ensure_app_naive_datetime",
    "ensure_app_timezone",
    "get_app_timezone",
    "now_in_app_naive_datetime",
    "now_in_app_timezone",
    "parse_clock_time",
]
