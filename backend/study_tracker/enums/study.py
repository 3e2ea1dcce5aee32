"""
Study Tracking Enums

Defines enums for the weekly focus chart and the nightly streak job.
"""

from enum import Enum


class WeekDay(str, Enum):
    """
    Day labels for the weekly focus distribution.

    Declaration order is the chart order: weeks start on Monday.
    """

    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"


class StreakOutcome(str, Enum):
    """
    Result of evaluating one user's day against their study goal.

    State transitions:
    - goal met → INCREMENTED (streak + 1)
    - goal missed → RESET (streak = 0)
    """

    INCREMENTED = "incremented"
    RESET = "reset"
