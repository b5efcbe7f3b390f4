"""
Academic calendar labels stamped onto room allocations.

The academic year starts in August: August through January belong to the
first semester, February through July to the second.
"""

from datetime import datetime

SEMESTER_ONE = "Semester 1"
SEMESTER_TWO = "Semester 2"


def current_semester(now: datetime) -> str:
    month = now.month
    return SEMESTER_ONE if month >= 8 or month <= 1 else SEMESTER_TWO


def current_academic_year(now: datetime) -> str:
    """``"2025/2026"`` for any date from August 2025 to July 2026."""
    year = now.year
    if now.month >= 8:
        return f"{year}/{year + 1}"
    return f"{year - 1}/{year}"
