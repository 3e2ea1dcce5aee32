"""
API-related enums.
"""

from enum import Enum


class RateLimitType(str, Enum):
    """
    Endpoint classes with their own request budget.

    Settings.get_rate_limit maps each member to a limit string.
    """

    # Everything not listed below (RATE_LIMIT_DEFAULT)
    DEFAULT = "default"

    # createUser / loginUser (RATE_LIMIT_AUTH)
    AUTH = "auth"
