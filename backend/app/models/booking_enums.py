"""
Tour and booking enumerations.

Status and tour-type columns are stored as plain strings so values outside
these enums are still accepted; the enums name the values the business
rules react to.
"""

import enum


class TourType(str, enum.Enum):
    """Tour type, selects which company per-km charge applies."""
    LOCAL = "Local"
    OUTSTATION = "Outstation"
    LUMPSUM = "Lumpsum"


class BookingStatus(str, enum.Enum):
    """Booking status values with fleet side effects."""
    IN_PROCESS = "In Process"  # Set on creation, vehicle goes On Booking
    COMPLETED = "Completed"  # Vehicle and driver released
