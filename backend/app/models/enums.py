"""
Account roles.
"""

import enum


class UserRole(str, enum.Enum):
    # Manages user accounts; cannot self-register
    ADMIN = "ADMIN"
    # Operator staff: leads, tours, bookings, fleet
    USER = "USER"
