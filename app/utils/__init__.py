"""
Utility functions
"""

from app.utils.dates import period_start, ranking_period, utc_now

__all__ = [
    "period_start",
    "ranking_period",
    "utc_now",
]
